import threading
from dataclasses import replace
from types import SimpleNamespace

import pytest

from dbreconcile.core.adapters.catalogs import CatalogsAdapter
from dbreconcile.core.adapters.functions import FunctionsAdapter
from dbreconcile.core.api import ApiResult
from dbreconcile.core.config import ReconcilerConfig
from dbreconcile.core.errors import ErrorKind
from dbreconcile.core.models import CATALOG_SCHEMA, FUNCTION_SCHEMA, CatalogState
from dbreconcile.core.reconciler import ResourceReconciler

FAST = ReconcilerConfig(wait_timeout=1.0, poll_interval=0.01)


class _Api:
    """Scripted remote API recording every call."""

    def __init__(
        self,
        *,
        create=None,
        gets=None,
        update=None,
        delete=None,
    ):
        self.calls: list[tuple] = []
        self._create = create or ApiResult.ok({})
        self._gets = list(gets or [ApiResult.missing("not found")])
        self._update = update or ApiResult.ok({})
        self._deletes = list(delete or [ApiResult.ok()])

    def create(self, payload):
        self.calls.append(("create", dict(payload)))
        return self._create

    def get(self, handle):
        self.calls.append(("get", handle))
        return self._gets.pop(0) if len(self._gets) > 1 else self._gets[0]

    def update(self, handle, payload):
        self.calls.append(("update", handle, dict(payload)))
        return self._update

    def delete(self, handle):
        self.calls.append(("delete", handle))
        return self._deletes.pop(0) if len(self._deletes) > 1 else self._deletes[0]

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)


def _functions(api, config=FAST):
    return ResourceReconciler(api, FUNCTION_SCHEMA, config, wait_for_ready=True)


# ==================== create ====================


def test_create_waits_until_function_is_queryable(function_a, function_a_remote):
    provisional = {"full_name": "main.default.functionA", "name": "functionA"}
    api = _Api(
        create=ApiResult.ok(provisional),
        gets=[
            ApiResult.missing("FUNCTION_DOES_NOT_EXIST"),
            ApiResult.missing("FUNCTION_DOES_NOT_EXIST"),
            ApiResult.ok(function_a_remote),
        ],
    )

    result = _functions(api).create(function_a)

    assert result.ok
    assert api.count("get") == 3
    assert all(c[1] == "main.default.functionA" for c in api.calls if c[0] == "get")
    assert result.state.full_name == "main.default.functionA"
    assert result.state.created_by == "me@example.com"
    assert result.state.routine_definition == "x + 1"


def test_create_sends_no_read_only_attributes(function_a):
    api = _Api(
        create=ApiResult.ok({"full_name": "main.default.functionA"}),
        gets=[ApiResult.ok({"full_name": "main.default.functionA"})],
    )

    _functions(api).create(replace(function_a, created_by="someone"))

    _, payload = api.calls[0]
    assert not set(payload) & FUNCTION_SCHEMA.read_only
    assert payload["name"] == "functionA"


def test_create_then_read_round_trips_identity_and_mutable(function_a, function_a_remote):
    api = _Api(
        create=ApiResult.ok({"full_name": "main.default.functionA"}),
        gets=[ApiResult.ok(function_a_remote)],
    )
    reconciler = _functions(api)

    created = reconciler.create(function_a)
    read = reconciler.read(created.state)

    assert read.ok
    for name in FUNCTION_SCHEMA.identity | {"routine_definition", "data_type"}:
        assert getattr(read.state, name) == getattr(function_a, name)


def test_create_failure_is_not_retried(function_a):
    api = _Api(create=ApiResult.failed("SCHEMA_DOES_NOT_EXIST: main.default"))

    result = _functions(api).create(function_a)

    assert not result.ok
    assert result.state is None
    assert result.diagnostics.kinds() == [ErrorKind.CREATE]
    assert result.diagnostics.errors()[0].summary == "failed to create function"
    assert "SCHEMA_DOES_NOT_EXIST" in result.diagnostics.errors()[0].detail
    assert api.count("create") == 1
    assert api.count("get") == 0


def test_create_with_missing_required_attributes_makes_no_call():
    api = _Api()

    result = _functions(api).create(FUNCTION_SCHEMA.state_type(name="f"))

    assert not result.ok
    assert set(result.diagnostics.kinds()) == {ErrorKind.CONVERSION}
    assert api.calls == []


def test_create_times_out_when_function_never_appears(function_a):
    api = _Api(create=ApiResult.ok({"full_name": "main.default.functionA"}))
    config = ReconcilerConfig(wait_timeout=0.05, poll_interval=0.01)

    result = _functions(api, config).create(function_a)

    assert result.diagnostics.kinds() == [ErrorKind.STABILIZATION_TIMEOUT]
    assert result.diagnostics.errors()[0].summary == "failed to create function"
    assert "is not yet available" in result.diagnostics.errors()[0].detail
    assert result.state is None


def test_create_halts_on_fatal_poll(function_a):
    api = _Api(
        create=ApiResult.ok({"full_name": "main.default.functionA"}),
        gets=[ApiResult.missing(), ApiResult.failed("PERMISSION_DENIED")],
    )

    result = _functions(api).create(function_a)

    assert result.diagnostics.kinds() == [ErrorKind.POLL_FATAL]
    assert api.count("get") == 2


def test_create_cancelled_before_polling(function_a):
    api = _Api(create=ApiResult.ok({"full_name": "main.default.functionA"}))
    cancel = threading.Event()
    cancel.set()

    result = _functions(api).create(function_a, cancel=cancel)

    assert result.diagnostics.kinds() == [ErrorKind.CANCELLED]
    assert api.count("get") == 0


def test_create_derives_handle_when_provisional_object_has_none(function_a, function_a_remote):
    api = _Api(create=ApiResult.ok({}), gets=[ApiResult.ok(function_a_remote)])

    _functions(api).create(function_a)

    assert ("get", "main.default.functionA") in api.calls


def test_create_applies_owner_after_stabilization(function_a, function_a_remote):
    api = _Api(
        create=ApiResult.ok({"full_name": "main.default.functionA"}),
        gets=[ApiResult.ok(function_a_remote)],
        update=ApiResult.ok({**function_a_remote, "owner": "data-eng"}),
    )

    result = _functions(api).create(replace(function_a, owner="data-eng"))

    assert result.ok
    assert api.calls[-1] == ("update", "main.default.functionA", {"owner": "data-eng"})
    assert result.state.owner == "data-eng"


def test_create_keeps_state_when_owner_update_fails(function_a, function_a_remote):
    api = _Api(
        create=ApiResult.ok({"full_name": "main.default.functionA"}),
        gets=[ApiResult.ok(function_a_remote)],
        update=ApiResult.failed("PERMISSION_DENIED"),
    )

    result = _functions(api).create(replace(function_a, owner="data-eng"))

    assert result.diagnostics.kinds() == [ErrorKind.UPDATE]
    assert result.state is not None
    assert result.state.full_name == "main.default.functionA"


def test_create_without_wait_uses_create_response():
    api = _Api(create=ApiResult.ok({"name": "sales", "full_name": "sales"}))
    reconciler = ResourceReconciler(api, CATALOG_SCHEMA, FAST)

    result = reconciler.create(CatalogState(name="sales", comment="x"))

    assert result.ok
    assert api.count("get") == 0
    assert result.state.full_name == "sales"
    assert result.state.comment == "x"


# ==================== read ====================


def test_read_missing_signals_removal_not_error(function_a_remote):
    api = _Api(gets=[ApiResult.missing("FUNCTION_DOES_NOT_EXIST")])
    state = FUNCTION_SCHEMA.state_type(full_name="main.default.functionA")

    result = _functions(api).read(state)

    assert result.removed is True
    assert result.ok
    assert len(result.diagnostics) == 0
    assert result.state is None


def test_read_other_errors_are_read_errors():
    api = _Api(gets=[ApiResult.failed("INTERNAL_ERROR")])
    state = FUNCTION_SCHEMA.state_type(full_name="main.default.functionA")

    result = _functions(api).read(state)

    assert result.removed is False
    assert result.diagnostics.kinds() == [ErrorKind.READ]


def test_read_uses_full_name_derived_from_parts(function_a, function_a_remote):
    api = _Api(gets=[ApiResult.ok(function_a_remote)])

    result = _functions(api).read(function_a)

    assert api.calls == [("get", "main.default.functionA")]
    assert result.state.function_id == "f-123"


def test_read_without_handle_is_an_error():
    result = _functions(_Api()).read(FUNCTION_SCHEMA.state_type(name="f"))

    assert result.diagnostics.kinds() == [ErrorKind.READ]


def test_read_reports_conversion_mismatch(function_a):
    api = _Api(gets=[ApiResult.ok({"is_deterministic": "yes"})])

    result = _functions(api).read(function_a)

    assert result.diagnostics.kinds() == [ErrorKind.CONVERSION]
    assert result.state is None


# ==================== update ====================


def test_update_sends_only_mutable_attributes(function_a, function_a_remote):
    prior = FUNCTION_SCHEMA.state_type(**function_a_remote)
    api = _Api(update=ApiResult.ok({**function_a_remote, "owner": "data-eng"}))

    result = _functions(api).update(replace(function_a, owner="data-eng"), prior)

    assert result.ok
    assert api.calls == [("update", "main.default.functionA", {"owner": "data-eng"})]
    assert result.state.owner == "data-eng"
    assert result.state.created_at == function_a_remote["created_at"]


def test_update_rejects_identity_change(function_a, function_a_remote):
    prior = FUNCTION_SCHEMA.state_type(**function_a_remote)
    api = _Api()

    result = _functions(api).update(replace(function_a, name="functionB"), prior)

    assert result.diagnostics.kinds() == [ErrorKind.UPDATE]
    assert "name" in result.diagnostics.errors()[0].summary
    assert api.calls == []


def test_update_failure_is_update_error(function_a, function_a_remote):
    prior = FUNCTION_SCHEMA.state_type(**function_a_remote)
    api = _Api(update=ApiResult.failed("PERMISSION_DENIED"))

    result = _functions(api).update(replace(function_a, owner="x"), prior)

    assert result.diagnostics.kinds() == [ErrorKind.UPDATE]
    assert result.state is None


def test_update_with_nothing_mutable_refreshes(function_a, function_a_remote):
    api = _Api(gets=[ApiResult.ok(function_a_remote)])

    result = _functions(api).update(function_a)

    assert result.ok
    assert api.count("update") == 0
    assert api.count("get") == 1


def test_update_catalog_payload():
    prior = CatalogState(name="sales", full_name="sales", storage_root="s3://b")
    api = _Api(update=ApiResult.ok({"name": "sales", "comment": "new"}))
    reconciler = ResourceReconciler(api, CATALOG_SCHEMA, FAST)

    result = reconciler.update(
        CatalogState(name="sales", comment="new", properties={"team": "x"}), prior
    )

    assert result.ok
    assert api.calls == [
        ("update", "sales", {"comment": "new", "properties": {"team": "x"}})
    ]
    assert result.state.storage_root == "s3://b"


# ==================== delete / import ====================


def test_delete_is_idempotent():
    api = _Api(delete=[ApiResult.ok(), ApiResult.missing("FUNCTION_DOES_NOT_EXIST")])
    state = FUNCTION_SCHEMA.state_type(full_name="main.default.functionA")
    reconciler = _functions(api)

    first = reconciler.delete(state)
    second = reconciler.delete(state)

    assert first.ok and second.ok
    assert api.count("delete") == 2


def test_delete_error_is_reported_not_raised():
    api = _Api(delete=[ApiResult.failed("PERMISSION_DENIED")])

    result = _functions(api).delete(
        FUNCTION_SCHEMA.state_type(full_name="main.default.functionA")
    )

    assert result.diagnostics.kinds() == [ErrorKind.DELETE]
    assert "PERMISSION_DENIED" in result.diagnostics.errors()[0].detail


def test_import_reads_by_handle(function_a_remote):
    api = _Api(gets=[ApiResult.ok(function_a_remote)])

    result = _functions(api).import_state("main.default.functionA")

    assert result.ok
    assert api.calls == [("get", "main.default.functionA")]
    assert result.state.name == "functionA"
    assert result.state.catalog_name == "main"


def test_import_of_missing_object_is_an_error():
    api = _Api(gets=[ApiResult.missing()])

    result = _functions(api).import_state("main.default.nope")

    assert result.removed is False
    assert result.diagnostics.kinds() == [ErrorKind.NOT_FOUND]


@pytest.mark.parametrize(
    "schema, noun", [(FUNCTION_SCHEMA, "function"), (CATALOG_SCHEMA, "catalog")]
)
def test_noun_strips_provider_prefix(schema, noun):
    assert ResourceReconciler(_Api(), schema).noun == noun


# ==================== SDK failures ====================


def test_read_reports_exhausted_sdk_retries_as_read_error():
    def get(name):
        raise TimeoutError("Timed out after 0:05:00")

    client = SimpleNamespace(catalogs=SimpleNamespace(get=get))
    reconciler = ResourceReconciler(CatalogsAdapter(client), CATALOG_SCHEMA, FAST)

    result = reconciler.read(CatalogState(name="c"))

    assert not result.ok
    assert result.diagnostics.kinds() == [ErrorKind.READ]
    assert "Timed out" in result.diagnostics.errors()[0].detail


def test_create_reports_malformed_parameters_as_create_error(function_a):
    def create(**kwargs):
        raise AssertionError("create must not be called")

    client = SimpleNamespace(functions=SimpleNamespace(create=create))
    desired = replace(function_a, input_params={"parameters": "x"})

    result = _functions(FunctionsAdapter(client)).create(desired)

    assert not result.ok
    assert result.diagnostics.kinds() == [ErrorKind.CREATE]
    assert "invalid function definition" in result.diagnostics.errors()[0].detail
