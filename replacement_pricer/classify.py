from __future__ import annotations

# (all keywords must appear in the lowercased title, label). First match wins.
SUBCATEGORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("letter", "box"), "Letter Box /HSW"),
    (("fan", "tower"), "Fans /HSW"),
    (("dehumidifier",), "Dehumidifier /HSW"),
    (("window", "ac"), "Window AC /HSW"),
    (("toilet", "brush"), "Bathroom Accessories /HSW"),
)

DEFAULT_SUBCATEGORY = "Other /HSW"


def subcategory(description: str | None) -> str:
    desc = (description or "").lower()
    for keywords, label in SUBCATEGORY_RULES:
        if all(k in desc for k in keywords):
            return label
    return DEFAULT_SUBCATEGORY
