from __future__ import annotations

import pytest

from soleerp.controller import AppController
from soleerp.db import connect
from soleerp.repository import StateRepository
from soleerp.services.demo_data import default_state


@pytest.fixture
def state():
    return default_state()


@pytest.fixture
def conn():
    c = connect(":memory:")
    yield c
    c.close()


@pytest.fixture
def repo(conn):
    return StateRepository(conn)


@pytest.fixture
def controller(repo):
    return AppController(repo)


@pytest.fixture
def admin(controller):
    controller.login("admin", "admin123")
    return controller
