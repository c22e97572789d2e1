from fastapi import Header, HTTPException, status

CONFIRM_HEADER = "X-Confirm-Action"
CONFIRM_HEADER_VALUES = {"yes", "true", "1"}


def is_confirmed(confirm: bool, header_value: str | None = None) -> bool:
    if confirm:
        return True
    return bool(header_value) and header_value.strip().lower() in CONFIRM_HEADER_VALUES


def check_confirmation(confirm: bool, action: str, header_value: str | None = None) -> None:
    if is_confirmed(confirm, header_value):
        return
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Action '{action}' must be confirmed: pass confirm=true or {CONFIRM_HEADER}: yes",
    )


def confirmation_header(x_confirm_action: str | None = Header(default=None, alias=CONFIRM_HEADER)) -> str | None:
    return x_confirm_action
