import base64
from io import StringIO

import pyperclip
import pytest

from satnames.shared.clipboard import copy_text, copy_with_osc52, copy_with_pyperclip


@pytest.mark.unit
def test_osc52_carries_base64_payload(monkeypatch):
    monkeypatch.delenv("TMUX", raising=False)
    stream = StringIO()
    url = "https://checkout.example/c/cs_123"
    assert copy_with_osc52(url, stream=stream)

    prefix, _, payload = stream.getvalue().rstrip("\x07").partition(";c;")
    assert prefix == "\x1b]52"
    assert base64.b64decode(payload).decode("utf-8") == url


@pytest.mark.unit
def test_copy_with_osc52_wraps_for_tmux(monkeypatch):
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1,0")
    stream = StringIO()
    assert copy_with_osc52("ABC", stream=stream)
    assert stream.getvalue().startswith("\x1bPtmux;")


@pytest.mark.unit
def test_copy_with_osc52_empty_text():
    assert copy_with_osc52("", stream=StringIO()) is False


@pytest.mark.unit
def test_copy_with_pyperclip_success(monkeypatch):
    copied = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)

    assert copy_with_pyperclip("4a5e1e4baab89f3a32518a88c31bc87f")
    assert copied == ["4a5e1e4baab89f3a32518a88c31bc87f"]


@pytest.mark.unit
def test_copy_with_pyperclip_without_clipboard(monkeypatch):
    def no_clipboard(text):
        raise pyperclip.PyperclipException("no clipboard mechanism")

    monkeypatch.setattr(pyperclip, "copy", no_clipboard)
    assert copy_with_pyperclip("abc") is False


@pytest.mark.unit
def test_copy_text_falls_back_to_osc52(monkeypatch):
    monkeypatch.setattr("satnames.shared.clipboard.copy_with_pyperclip", lambda text: False)
    monkeypatch.setattr("satnames.shared.clipboard.copy_with_osc52", lambda text: True)

    assert copy_text("ABC") == "osc52"


@pytest.mark.unit
def test_copy_text_reports_failure(monkeypatch):
    monkeypatch.setattr("satnames.shared.clipboard.copy_with_pyperclip", lambda text: False)
    monkeypatch.setattr("satnames.shared.clipboard.copy_with_osc52", lambda text: False)

    assert copy_text("ABC") is None
