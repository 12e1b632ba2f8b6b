from __future__ import annotations

PARTIAL_NOTICE = "Some layers may already have moved."


class StackError(Exception):
    code = "stack_error"

    def __init__(self, message: str, *, partial: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.partial = partial

    def mark_partial(self) -> StackError:
        self.partial = True
        return self

    def user_message(self) -> str:
        if self.partial:
            return f"{self.message} {PARTIAL_NOTICE}"
        return self.message


class InsufficientSelection(StackError):
    code = "insufficient_selection"


class BrokenHierarchy(StackError):
    code = "broken_hierarchy"


class NoParent(StackError):
    code = "no_parent"


class UnsupportedContainer(StackError):
    code = "unsupported_container"


class ConcurrentModification(StackError):
    code = "concurrent_modification"
