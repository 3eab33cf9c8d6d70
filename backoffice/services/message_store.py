from flask import session

# Written by the accept action, consumed by the next detail view.
UPDATE_ORDER_DETAILS_INFO_KEY = 'UpdateOrderDetailsContext.Info'

_SESSION_KEY = '_transient_messages'


def put(key, message):
    messages = dict(session.get(_SESSION_KEY) or {})
    messages[key] = message
    session[_SESSION_KEY] = messages


def take_once(key):
    messages = dict(session.get(_SESSION_KEY) or {})
    message = messages.pop(key, None)
    if message is not None:
        session[_SESSION_KEY] = messages
    return message
