from ulid import ULID


def new_ulid(prefix: str | None = None) -> str:
    value = str(ULID()).lower()
    return f"{prefix}{value}" if prefix else value


def new_stream_id() -> str:
    return new_ulid("ls_")


def new_request_id() -> str:
    return new_ulid()[-8:]


def new_call_id() -> str:
    return new_ulid("call_")
