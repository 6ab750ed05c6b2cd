from budgetbot.telegram_types import IgnoredUpdate, TelegramUpdate, TextMessageUpdate, classify_update


def _update(**message):
    payload = {"message_id": 1, "chat": {"id": 99}, **message}
    return TelegramUpdate.model_validate({"update_id": 7, "message": payload})


def test_text_message_is_classified():
    update = _update(**{"from": {"id": 5, "is_bot": False, "first_name": "Bob"}, "text": "  10 Food "})
    inbound = classify_update(update)

    assert isinstance(inbound, TextMessageUpdate)
    assert inbound.chat_id == 99
    assert inbound.sender.id == 5
    assert inbound.text == "10 Food"


def test_updates_without_usable_text_are_ignored():
    assert classify_update(TelegramUpdate.model_validate({"update_id": 1})) == IgnoredUpdate(reason="no message")
    assert classify_update(_update(text="10 Food")).reason == "no sender"
    assert classify_update(_update(**{"from": {"id": 5, "is_bot": True}, "text": "10 Food"})).reason == "sent by a bot"
    assert classify_update(_update(**{"from": {"id": 5}, "sticker": {"file_id": "x"}})).reason == "no text"
