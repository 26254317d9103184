# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import pytest

from passivescan.http.models import HttpMessage, HttpRequest, HttpResponse
from passivescan.model import ALL_TECH, CustomPage, CustomPageType, Session, Tech, TechSet
from passivescan.pscan.data import PassiveScanData
from passivescan.users import ExtensionUserManagement, User


def _message(url="https://shop.example.com/cart", status=200, body=""):
    return HttpMessage(
        request=HttpRequest(url=url),
        response=HttpResponse(status_code=status, body=body.encode("utf-8")),
    )


class CountingRegistry:
    def __init__(self, contexts):
        self.contexts = list(contexts)
        self.calls = []

    def get_contexts_for_url(self, url):
        self.calls.append(url)
        return list(self.contexts)


class StubContext:
    def __init__(self, context_id=1, tech_set=ALL_TECH, pages=None):
        self.id = context_id
        self.tech_set = tech_set
        self.pages = pages or {}
        self.calls = []

    def is_custom_page_with_fallback(self, message, page_type):
        self.calls.append((message, page_type))
        result = self.pages.get(page_type, False)
        return result(message) if callable(result) else result


class CountingAuthManager:
    def __init__(self, users):
        self.users = list(users)
        self.calls = 0

    def get_users(self):
        self.calls += 1
        return self.users


class CountingUserManagement:
    def __init__(self, users):
        self.manager = CountingAuthManager(users)
        self.requested = []

    def get_context_user_auth_manager(self, context_id):
        self.requested.append(context_id)
        return self.manager


def test_no_context_defaults():
    registry = CountingRegistry([])
    management = CountingUserManagement([User(id=1, context_id=1, name="alice")])
    message = _message(status=404, body="Page not found")
    data = PassiveScanData(message, registry, management)

    assert data.has_context() is False
    assert data.context is None
    assert data.tech_set is ALL_TECH
    assert data.get_users() == ()
    assert management.requested == []
    assert data.is_page_200(message) is False
    assert data.is_page_404(message) is False
    assert data.is_page_500(message) is False
    assert data.is_page_other(message) is False
    assert data._custom_pages == {}


def test_no_context_is_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="passivescan.pscan.data")
    PassiveScanData(_message(url="https://unknown.example/"), CountingRegistry([]))
    assert "No context found for: https://unknown.example/" in caplog.text


def test_registry_is_queried_once_at_construction():
    context = StubContext()
    registry = CountingRegistry([context])
    message = _message()
    data = PassiveScanData(message, registry)

    assert registry.calls == [message.request.url]
    data.has_context()
    data.tech_set
    data.get_users()
    data.is_page_200(message)
    assert len(registry.calls) == 1


def test_single_context_exposes_its_tech_set():
    tech_set = TechSet.of([Tech.get("Db.MySQL")])
    context = StubContext(tech_set=tech_set)
    data = PassiveScanData(_message(), CountingRegistry([context]))

    assert data.has_context() is True
    assert data.context is context
    assert data.tech_set is tech_set


def test_first_context_in_registry_order_wins():
    first = StubContext(context_id=1)
    second = StubContext(context_id=2)
    data = PassiveScanData(_message(), CountingRegistry([first, second]))
    assert data.context is first


def test_users_are_queried_once_and_snapshotted():
    alice = User(id=1, context_id=7, name="alice")
    bob = User(id=2, context_id=7, name="bob")
    management = CountingUserManagement([alice, bob])
    data = PassiveScanData(_message(), CountingRegistry([StubContext(context_id=7)]), management)

    first = data.get_users()
    second = data.get_users()
    third = data.get_users()

    assert first == (alice, bob)
    assert first is second is third
    assert management.requested == [7]
    assert management.manager.calls == 1


def test_users_cannot_be_corrupted_through_the_source_list():
    alice = User(id=1, context_id=1, name="alice")
    management = CountingUserManagement([alice])
    data = PassiveScanData(_message(), CountingRegistry([StubContext()]), management)

    users = data.get_users()
    management.manager.users.append(User(id=2, context_id=1, name="mallory"))

    assert isinstance(users, tuple)
    with pytest.raises(AttributeError):
        users.append(User(id=3, context_id=1, name="eve"))  # type: ignore[attr-defined]
    assert data.get_users() == (alice,)


def test_users_without_user_management_are_empty():
    data = PassiveScanData(_message(), CountingRegistry([StubContext()]), None)
    assert data.has_context() is True
    assert data.get_users() == ()
    assert data.get_users() is data.get_users()


def test_user_management_errors_propagate():
    class BrokenManagement:
        def get_context_user_auth_manager(self, context_id):
            raise RuntimeError("user store unavailable")

    data = PassiveScanData(_message(), CountingRegistry([StubContext()]), BrokenManagement())
    with pytest.raises(RuntimeError, match="user store unavailable"):
        data.get_users()


def test_registry_errors_propagate():
    class BrokenRegistry:
        def get_contexts_for_url(self, url):
            raise ValueError("malformed url")

    with pytest.raises(ValueError, match="malformed url"):
        PassiveScanData(_message(), BrokenRegistry())


def test_page_classification_is_cached_per_kind():
    context = StubContext(pages={CustomPageType.NOTFOUND_404: lambda msg: b"not found" in msg.response.body})
    msg_a = _message(status=200, body="sorry, not found")
    msg_b = _message(status=200, body="welcome")
    data = PassiveScanData(msg_a, CountingRegistry([context]))

    assert data.is_page_404(msg_a) is True
    assert data.is_page_404(msg_b) is True
    assert data.is_page_404(msg_a) is True
    assert context.calls == [(msg_a, CustomPageType.NOTFOUND_404)]


def test_each_kind_is_evaluated_independently():
    context = StubContext(
        pages={
            CustomPageType.NOTFOUND_404: True,
            CustomPageType.OK_200: False,
            CustomPageType.ERROR_500: False,
            CustomPageType.OTHER: True,
        }
    )
    message = _message()
    data = PassiveScanData(message, CountingRegistry([context]))

    assert data.is_page_404(message) is True
    assert data.is_page_200(message) is False
    assert data.is_page_500(message) is False
    assert data.is_page_other(message) is True
    for _ in range(3):
        data.is_page_200(message)
        data.is_page_404(message)
        data.is_page_500(message)
        data.is_page_other(message)
    assert [page_type for _, page_type in context.calls] == [
        CustomPageType.NOTFOUND_404,
        CustomPageType.OK_200,
        CustomPageType.ERROR_500,
        CustomPageType.OTHER,
    ]


def test_custom_not_found_page_with_real_session():
    session = Session(strip_query=True)
    context = session.new_context("shop")
    context.add_include_regex(r"https://shop\.example\.com/.*")
    context.add_custom_page(CustomPage(context_id=context.id, page_matcher="We could not find that page"))
    management = ExtensionUserManagement()
    management.add_user(context.id, "alice")

    message = _message(url="https://shop.example.com/missing?id=3", status=200, body="<h1>We could not find that page</h1>")
    data = PassiveScanData(message, session, management)

    assert data.context is context
    assert [user.name for user in data.get_users()] == ["alice"]
    assert data.is_page_404(message) is True
    assert data.is_page_200(message) is False
    assert data.is_page_500(message) is False
    assert data.is_page_other(message) is False


def test_session_without_matching_context():
    session = Session()
    session.new_context("other").add_include_regex(r"https://other\.example/.*")
    message = _message(url="https://shop.example.com/", status=404)
    data = PassiveScanData(message, session, ExtensionUserManagement())

    assert data.has_context() is False
    assert data.tech_set is ALL_TECH
    assert data.get_users() == ()
    assert data.is_page_404(message) is False
