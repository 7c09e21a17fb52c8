import pytest

from contact_list import ContactStore


@pytest.fixture
def store(tmp_path):
    return ContactStore(tmp_path / "contact_list.txt")


@pytest.fixture
def write_lines(tmp_path):
    """Write raw lines to the contact list file, bypassing insert"""
    def _write(*lines, name="contact_list.txt"):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write
