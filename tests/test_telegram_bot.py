from types import SimpleNamespace

from taskbot.telegram.bot import build_event, split_message


def _message(text, chat_type="private", first_name="Julia"):
    return SimpleNamespace(
        text=text,
        from_user=SimpleNamespace(id=7, first_name=first_name, username="julia_k"),
        chat=SimpleNamespace(id=-100, type=chat_type),
    )


def test_build_event_private_chat() -> None:
    event = build_event(_message("zeige aufgaben"))

    assert event.text == "zeige aufgaben"
    assert event.sender_id == 7
    assert event.sender_name == "Julia"
    assert event.chat_id == -100
    assert event.is_group is False


def test_build_event_group_chat_uses_username_without_first_name() -> None:
    event = build_event(_message("@bot liste", chat_type="supergroup", first_name=None))

    assert event.is_group is True
    assert event.sender_name == "julia_k"


def test_split_message_keeps_short_text() -> None:
    assert split_message("hallo") == ["hallo"]


def test_split_message_breaks_on_lines() -> None:
    text = "\n".join(["x" * 30] * 10)

    chunks = split_message(text, limit=100)

    assert all(len(chunk) <= 100 for chunk in chunks)
    assert "".join(chunks) == text
