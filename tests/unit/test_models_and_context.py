"""
Unit tests for the Link record and RequestContext.
"""

import pytest

from shortlink.context import RequestContext, ensure_context
import shortlink.errors as errors
from shortlink.errors import ContextCancelledError, ContextError, DeadlineExceededError, ShortlinkError
from shortlink.storage.models import Link


# -------------------------
# Link
# -------------------------

def test_link_defaults():
    link = Link(short_code="abc12", long_url="https://x.com")
    assert link.visit_count == 0
    assert link.created_at is None


@pytest.mark.parametrize("kwargs", [{"short_code": ""}, {"short_code": "abc12", "visit_count": -1}])
def test_link_rejects_invalid_fields(kwargs):
    kwargs.setdefault("long_url", "https://x.com")
    with pytest.raises(ValueError):
        Link(**kwargs)


def test_with_visit_returns_new_instance():
    link = Link(short_code="abc12", long_url="https://x.com")
    bumped = link.with_visit()
    assert bumped.visit_count == 1
    assert link.visit_count == 0
    assert bumped.short_code == link.short_code


def test_to_dict_without_created_at():
    assert Link(short_code="abc12", long_url="https://x.com").to_dict() == {
        "short_code": "abc12",
        "long_url": "https://x.com",
        "visit_count": 0,
        "created_at": None,
    }


# -------------------------
# RequestContext
# -------------------------

def test_fresh_context_passes_check():
    ctx = RequestContext()
    ctx.check()
    assert not ctx.cancelled
    assert not ctx.expired
    assert ctx.remaining() is None


def test_cancel_then_check_raises():
    ctx = RequestContext()
    ctx.cancel()
    assert ctx.cancelled
    with pytest.raises(ContextCancelledError):
        ctx.check()


def test_deadline_exceeded():
    ctx = RequestContext(timeout=0)
    assert ctx.expired
    assert ctx.remaining() == 0.0
    with pytest.raises(DeadlineExceededError):
        ctx.check()


def test_context_errors_share_a_base():
    assert issubclass(ContextCancelledError, ContextError)
    assert issubclass(DeadlineExceededError, ContextError)


def test_background_context_ignores_cancel():
    ctx = RequestContext.background()
    ctx.cancel()
    assert not ctx.cancellable
    assert not ctx.cancelled
    ctx.check()


def test_ensure_context():
    ctx = RequestContext()
    assert ensure_context(ctx) is ctx
    assert isinstance(ensure_context(None), RequestContext)


@pytest.mark.parametrize("exc_type", [ContextCancelledError, DeadlineExceededError])
def test_context_errors_are_service_errors(exc_type):
    assert issubclass(exc_type, ContextError)
    assert issubclass(exc_type, ShortlinkError)


def test_every_error_class_is_documented():
    undocumented = [
        name
        for name, obj in vars(errors).items()
        if isinstance(obj, type) and issubclass(obj, Exception) and obj.__module__ == errors.__name__
        and not (obj.__doc__ or "").strip()
    ]
    assert undocumented == []
