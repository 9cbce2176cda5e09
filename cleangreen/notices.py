"""
Notices returned to the browser alongside data.

The front end renders these as toasts. They are plain values built per request
and returned in the response body; nothing here holds process-wide state.
"""

from typing import Literal, Optional

from pydantic import BaseModel


class Notice(BaseModel):
    title: str
    description: Optional[str] = None
    variant: Literal["default", "destructive"] = "default"


def success(title: str, description: Optional[str] = None) -> Notice:
    return Notice(title=title, description=description)


def failure(title: str, description: Optional[str] = None) -> Notice:
    return Notice(title=title, description=description, variant="destructive")


def format_cents(cents: Optional[int]) -> str:
    """Format an amount in cents as dollars, e.g. 3500 -> "$35.00"."""
    return f"${(cents or 0) / 100:.2f}"
