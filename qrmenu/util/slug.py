import re
import unicodedata


def make_slug(name: str) -> str:
    """
    URL-safe slug for a business name: "Café Ñandú  Grill" -> "cafe-nandu-grill".
    Accents are folded to their base letter before anything else is stripped.
    """
    folded = unicodedata.normalize("NFKD", name.lower())
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    folded = re.sub(r"[^\w\s-]", "", folded)
    folded = re.sub(r"\s+", "-", folded.strip())
    return re.sub(r"-+", "-", folded).strip("-")
