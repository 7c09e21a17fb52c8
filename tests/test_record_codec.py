import pytest

from contact_list import (
    ContactListError,
    ErrorKind,
    capitalize_name,
    format_number,
    format_record,
    parse_record,
    render_line,
    render_record,
    validate_name,
    validate_number,
)


def test_parse_record_extracts_name_and_digits():
    assert parse_record("Mary Anne: 808-779-1466") == ("Mary Anne", "8087791466")


def test_parse_record_ignores_odd_hyphenation():
    assert parse_record("Jo: 1112-22-3333") == ("Jo", "1112223333")


def test_parse_record_splits_at_first_colon():
    name, digits = parse_record("Jo: 111:222:3333")
    assert name == "Jo"
    assert digits == "1112223333"


def test_parse_record_without_colon_is_malformed():
    with pytest.raises(ContactListError) as exc:
        parse_record("Mary Anne 808-779-1466")
    assert exc.value.kind is ErrorKind.MALFORMED_RECORD


def test_format_record_groups_digits():
    assert format_record("Jo", "1112223333") == "Jo: 111-222-3333"
    assert format_number("8087791466") == "808-779-1466"


def test_format_record_rejects_wrong_length():
    with pytest.raises(ContactListError) as exc:
        format_record("Jo", "111222333")
    assert exc.value.kind is ErrorKind.INVALID_NUMBER


def test_render_record_pads_columns():
    rendered = render_record("Mary Anne", "808-779-1466")
    assert len(rendered) == 50
    assert rendered.startswith("Mary Anne" + " " * 21 + "808-779-1466")


def test_render_line_uses_stored_number_text():
    assert render_line("Mary Anne David: 843-798-6698") == (
        f"{'Mary Anne David':<30}{'843-798-6698':<20}"
    )


@pytest.mark.parametrize("name", ["O'Brien", "Jo2", "Mary-Anne", "Zoë"])
def test_validate_name_rejects_non_letters(name):
    with pytest.raises(ContactListError) as exc:
        validate_name(name)
    assert exc.value.kind is ErrorKind.INVALID_NAME


def test_validate_name_rejects_blank():
    for name in ("", "   "):
        with pytest.raises(ContactListError) as exc:
            validate_name(name)
        assert exc.value.message == "Name cannot be empty"


def test_validate_name_accepts_letters_and_spaces():
    validate_name("Mary Anne")
    validate_name("jo")


def test_validate_number_checks_length_first():
    with pytest.raises(ContactListError) as exc:
        validate_number("12345")
    assert exc.value.kind is ErrorKind.INVALID_NUMBER
    assert "10 digits" in exc.value.message


def test_validate_number_rejects_symbols():
    with pytest.raises(ContactListError) as exc:
        validate_number("808-779-14")
    assert "letters/symbols" in exc.value.message


def test_validate_number_accepts_ten_digits():
    validate_number("1234567890")


def test_capitalize_name():
    assert capitalize_name("mARY anne") == "Mary Anne"
    assert capitalize_name("  jo   DOE") == "  Jo   Doe"


def test_error_str_carries_kind():
    err = ContactListError(ErrorKind.FILE_NOT_FOUND, "missing.txt")
    assert str(err) == "FileNotFound: missing.txt"
