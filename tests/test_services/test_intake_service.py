"""
Tests for Intake Service
Tests logging and deleting dose actions
"""

import pytest
from datetime import datetime, timezone, timedelta
from sqlalchemy.orm import Session

from models import Intake, Schedule, User, IntakeStatus
from services.intake_service import IntakeService
from services.errors import NotFoundError


UTC = timezone.utc


@pytest.fixture
def intake_service():
    """Create intake service instance"""
    return IntakeService()


@pytest.mark.database
class TestCreateIntake:
    """Tests for logging intakes"""

    @pytest.mark.asyncio
    async def test_defaults_to_now(self, intake_service, db_session: Session,
                                   test_user: User, daily_schedule: Schedule):
        now = datetime(2025, 12, 26, 8, 3, tzinfo=UTC)

        intake = await intake_service.create_intake(
            test_user.id, daily_schedule.id, IntakeStatus.TAKEN, now=now, db=db_session
        )

        assert intake.taken_at == datetime(2025, 12, 26, 8, 3)
        assert intake.medication_id == daily_schedule.medication_id
        assert intake.status == "taken"

    @pytest.mark.asyncio
    async def test_stored_as_utc(self, intake_service, db_session: Session,
                                 test_user: User, daily_schedule: Schedule):
        taken_at = datetime(2025, 12, 26, 9, 0, tzinfo=timezone(timedelta(hours=1)))

        intake = await intake_service.create_intake(
            test_user.id, daily_schedule.id, "skipped", taken_at=taken_at, db=db_session
        )

        assert intake.taken_at == datetime(2025, 12, 26, 8, 0)
        assert intake.status == "skipped"

    @pytest.mark.asyncio
    async def test_inactive_schedule(self, intake_service, db_session: Session,
                                     test_user: User, daily_schedule: Schedule):
        daily_schedule.is_active = False
        db_session.commit()

        with pytest.raises(NotFoundError):
            await intake_service.create_intake(
                test_user.id, daily_schedule.id, IntakeStatus.TAKEN, db=db_session
            )

    @pytest.mark.asyncio
    async def test_foreign_schedule(self, intake_service, db_session: Session,
                                    other_user: User, daily_schedule: Schedule):
        with pytest.raises(NotFoundError):
            await intake_service.create_intake(
                other_user.id, daily_schedule.id, IntakeStatus.TAKEN, db=db_session
            )

    @pytest.mark.asyncio
    async def test_unknown_status(self, intake_service, db_session: Session,
                                  test_user: User, daily_schedule: Schedule):
        with pytest.raises(ValueError):
            await intake_service.create_intake(
                test_user.id, daily_schedule.id, "missed", db=db_session
            )


@pytest.mark.database
class TestDeleteIntake:
    """Tests for listing and deleting intakes"""

    @pytest.mark.asyncio
    async def test_list_newest_first(self, intake_service, db_session: Session,
                                     test_user: User, daily_schedule: Schedule, make_intake):
        first = make_intake(daily_schedule, datetime(2025, 12, 26, 8, 0, tzinfo=UTC))
        second = make_intake(daily_schedule, datetime(2025, 12, 26, 20, 0, tzinfo=UTC))

        intakes = await intake_service.list_for_user(test_user.id, db=db_session)

        assert [i.id for i in intakes] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_delete(self, intake_service, db_session: Session,
                          test_user: User, daily_schedule: Schedule, make_intake):
        intake = make_intake(daily_schedule, datetime(2025, 12, 26, 8, 0, tzinfo=UTC))

        await intake_service.delete_intake(test_user.id, intake.id, db=db_session)

        assert db_session.query(Intake).count() == 0

    @pytest.mark.asyncio
    async def test_delete_foreign(self, intake_service, db_session: Session,
                                  other_user: User, daily_schedule: Schedule, make_intake):
        intake = make_intake(daily_schedule, datetime(2025, 12, 26, 8, 0, tzinfo=UTC))

        with pytest.raises(NotFoundError):
            await intake_service.delete_intake(other_user.id, intake.id, db=db_session)
