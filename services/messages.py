"""User-facing message catalog (Dutch)."""

from __future__ import annotations

MESSAGES: dict[str, str] = {
    "method_not_allowed": "Deze methode is niet toegestaan.",
    "origin_rejected": "Dit verzoek is niet toegestaan.",
    "unsupported_media_type": "Verstuur het formulier als JSON.",
    "rate_limited": "Te veel inschrijfpogingen. Probeer het later opnieuw.",
    "invalid_request": "Ongeldig verzoek.",
    "validation_failed": "Controleer je gegevens en probeer het opnieuw.",
    "server_misconfigured": "Server is niet volledig ingesteld ({missing}).",
    "internal_fault": "Serverfout. Probeer het later opnieuw.",
    "missing_email": "Vul je e-mailadres in.",
    "missing_first_name": "Vul je voornaam in.",
    "missing_last_name": "Vul je achternaam in.",
    "missing_age_bracket": "Kies je leeftijdscategorie.",
    "invalid_email": "Vul een geldig e-mailadres in.",
    "invalid_age_bracket": "Kies een geldige leeftijdscategorie.",
    "already_subscribed": "Dit e-mailadres is al ingeschreven.",
    "pending_confirmation": "Bijna klaar! Check je e-mail om je inschrijving te bevestigen.",
    "upstream_validation_rejected": "Controleer je gegevens en probeer het opnieuw.",
    "upstream_rate_limited": "Het is nu erg druk. Probeer het later opnieuw.",
    "upstream_transient_failure": "Inschrijven mislukt. Probeer het later opnieuw.",
}


def message(key: str, **values: str) -> str:
    template = MESSAGES[key]
    return template.format(**values) if values else template
