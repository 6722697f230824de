from replacement_pricer.classify import DEFAULT_SUBCATEGORY, subcategory


def test_rules():
    assert subcategory("Gibraltar Steel Letter Box, Black") == "Letter Box /HSW"
    assert subcategory("Honeywell QuietSet Tower Fan") == "Fans /HSW"
    assert subcategory("Frigidaire 50 Pint Dehumidifier") == "Dehumidifier /HSW"
    assert subcategory("LG Window AC 8000 BTU") == "Window AC /HSW"
    assert subcategory("OXO Toilet Brush and Canister") == "Bathroom Accessories /HSW"


def test_first_rule_wins():
    assert subcategory("Letter box shaped tower fan") == "Letter Box /HSW"


def test_default():
    assert subcategory("Cordless Drill") == DEFAULT_SUBCATEGORY
    assert subcategory("") == DEFAULT_SUBCATEGORY
    assert subcategory(None) == DEFAULT_SUBCATEGORY
