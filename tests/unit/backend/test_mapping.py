"""Tests for row <-> schema mapping."""

from club.backend.base import BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES
from club.backend.fixtures import fixture_rows
from club.backend.mapping import TABLE_SCHEMAS, from_row, to_row, user_from_row
from club.schemas.user import PlanType, Role, UserUpdate

from conftest import NOW


class TestMapping:
    def test_fixture_rows_survive_mapping(self):
        rows = fixture_rows(NOW)
        for table in (PROFILES, MODALITIES, CLASS_SESSIONS, BOOKINGS):
            for row in rows[table]:
                assert to_row(from_row(TABLE_SCHEMAS[table], row)) == row

    def test_enums_become_strings(self):
        user = user_from_row(fixture_rows(NOW)[PROFILES][1])
        assert user.role is Role.STUDENT
        assert user.plan_type is PlanType.MENSALISTA
        row = to_row(user)
        assert row["role"] == "STUDENT"
        assert row["plan_type"] == "Mensalista"

    def test_partial_update_keeps_only_set_fields(self):
        changes = to_row(UserUpdate(phone="11955554444", plan_type=PlanType.OUTRO), exclude_unset=True)
        assert changes == {"phone": "11955554444", "plan_type": "Outro"}

    def test_camel_case_aliases_accepted(self):
        update = UserUpdate.model_validate({"planType": "Wellhub"})
        assert to_row(update, exclude_unset=True) == {"plan_type": "Wellhub"}
