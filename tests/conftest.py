"""Shared fixtures: schema documents and a fixed temporal anchor"""

from datetime import datetime

import pytest

from sqlseed.config import Config
from sqlseed.context import GenerationContext


USERS_ORDERS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<schema>
  <table name="users" rows="3">
    <column name="id" type="integer" primary-key="true"/>
    <column name="email" type="varchar(120)" unique="true" generator="email"/>
    <column name="status" type="enum">
      <value>active</value>
      <value>banned</value>
    </column>
    <column name="tier" type="text" check="in ('gold', 'silver')"/>
    <column name="signed_up" type="date"/>
  </table>
  <table name="orders" rows="5">
    <column name="id" type="integer" primary-key="true"/>
    <column name="user_id" type="integer"/>
    <column name="total" type="decimal(10, 2)" min="1" max="500"/>
    <column name="paid" type="boolean"/>
    <column name="note" type="text" nullable="true"/>
    <foreign-key columns="user_id" references="users" referenced-columns="id"/>
  </table>
</schema>
"""

USERS_ORDERS_YAML = """
tables:
  - name: orders
    rows: 5
    columns:
      - {name: id, type: integer, primary-key: true}
      - {name: user_id, type: integer, references: users.id}
      - {name: placed_at, type: datetime}
  - name: users
    rows: 3
    columns:
      - {name: id, type: integer, primary-key: true}
      - {name: first_name, type: varchar(40)}
"""


@pytest.fixture
def users_orders_xml():
    return USERS_ORDERS_XML


@pytest.fixture
def users_orders_yaml():
    return USERS_ORDERS_YAML


@pytest.fixture
def anchor():
    return datetime(2024, 6, 15)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def context(anchor):
    return GenerationContext(seed=1234, anchor=anchor)
