"""
Business performance target tests: permissions and the per-field audit trail.
"""
import pytest

from models.target import BPTargetAuditLog
from services.brand_access import BrandAccessError, CallerContext
from services.target_service import (
    get_target,
    list_audit_log,
    list_targets,
    save_target,
    target_achievement,
)
from utils.normalize import ValidationError

ADMIN = CallerContext(role='admin')
BASE = {'currency': 'MYR', 'line': 'ABC', 'year': 2025, 'quarter': 'Q1'}


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.mark.usefixtures("ctx")
class TestSaveTarget:

    def test_create_audits_given_fields(self):
        result = save_target({**BASE, 'target_ggr': 1000}, ADMIN, changed_by='ops@example.com')

        assert result['action'] == 'CREATE'
        assert result['changedFields'] == ['target_ggr']
        assert result['target']['targetGgr'] == 1000
        assert BPTargetAuditLog.query.count() == 1

    def test_second_save_audits_only_changed_fields(self):
        save_target({**BASE, 'target_ggr': 1000}, ADMIN)

        unchanged = save_target({**BASE, 'target_ggr': 1000}, ADMIN)
        assert unchanged['action'] == 'UPDATE'
        assert unchanged['changedFields'] == []
        assert BPTargetAuditLog.query.count() == 1

        changed = save_target({**BASE, 'target_ggr': 1200, 'target_deposit_amount': 5000}, ADMIN)
        assert changed['changedFields'] == ['target_ggr', 'target_deposit_amount']
        assert BPTargetAuditLog.query.count() == 3

        # newest first; keep the latest row per field
        latest = {entry['fieldName']: entry for entry in reversed(list_audit_log('MYR'))}
        assert latest['target_ggr']['oldValue'] == 1000
        assert latest['target_ggr']['newValue'] == 1200
        assert latest['target_ggr']['action'] == 'UPDATE'
        assert latest['target_ggr']['role'] == 'admin'

    def test_manager_limited_to_own_currency(self):
        with pytest.raises(BrandAccessError):
            save_target({**BASE, 'target_ggr': 1}, CallerContext(role='manager_sgd'))

        result = save_target({**BASE, 'target_ggr': 1}, CallerContext(role='manager_myr'))
        assert result['action'] == 'CREATE'

    def test_viewer_cannot_save(self):
        with pytest.raises(BrandAccessError):
            save_target({**BASE, 'target_ggr': 1}, CallerContext(role='viewer'))
        assert BPTargetAuditLog.query.count() == 0

    def test_invalid_quarter(self):
        with pytest.raises(ValidationError):
            save_target({**BASE, 'quarter': 'Q5'}, ADMIN)

    def test_missing_keys(self):
        with pytest.raises(ValidationError):
            save_target({'currency': 'MYR', 'year': 2025}, ADMIN)


@pytest.mark.usefixtures("ctx")
class TestListTargets:

    def test_filters_and_access_scope(self):
        save_target({**BASE, 'target_ggr': 10}, ADMIN)
        save_target({**BASE, 'line': 'XYZ', 'target_ggr': 20}, ADMIN)
        save_target({**BASE, 'quarter': 'Q2', 'target_ggr': 30}, ADMIN)

        assert len(list_targets('MYR')) == 3
        assert len(list_targets('MYR', year=2025, quarter='Q1')) == 2
        assert len(list_targets('SGD')) == 0

        restricted = CallerContext(role='viewer', allowed_brands=['XYZ'])
        assert [t['line'] for t in list_targets('MYR', caller=restricted)] == ['XYZ']

    def test_get_target(self):
        save_target({**BASE, 'target_ggr': 10}, ADMIN)

        target = get_target('myr', 'ABC', 2025, 'Q1')
        assert target is not None
        assert target.target_ggr == 10
        assert get_target('MYR', 'ABC', 2025, 'Q2') is None

    def test_audit_log_limit(self):
        save_target({**BASE, 'target_ggr': 10, 'forecast_ggr': 12}, ADMIN)
        assert len(list_audit_log('MYR', limit=1)) == 1
        assert list_audit_log('SGD') == []


def test_target_achievement():
    assert target_achievement(50, 200) == 25
    assert target_achievement(50, 0) == 0
    assert target_achievement(None, 100) == 0
