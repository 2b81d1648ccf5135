"""
Tests for errors.py - error payloads and the respond wrapper.
"""

from missioncontrol.errors import (
    ErrorCodes,
    InvalidRequestError,
    NotFoundError,
    error_shape,
    responds,
)


class Sink:
    def __init__(self):
        self.calls = []

    def __call__(self, ok, payload, error):
        self.calls.append((ok, payload, error))


class TestErrorShape:
    """Test structured error payloads."""

    def test_without_details(self):
        assert error_shape(ErrorCodes.NOT_FOUND, "Job not found") == {
            "code": "NOT_FOUND",
            "message": "Job not found",
        }

    def test_with_details(self):
        error = error_shape(ErrorCodes.INVALID_REQUEST, "bad", details={"field": "id"})
        assert error["details"] == {"field": "id"}

    def test_exception_codes(self):
        assert InvalidRequestError("x").code == "INVALID_REQUEST"
        assert NotFoundError().to_error() == {"code": "NOT_FOUND", "message": "Job not found"}


class TestResponds:
    """Test that wrapped handlers respond exactly once."""

    def test_success(self):
        @responds("test.ok", "Failed")
        def handler(params):
            return {"ok": True, "echo": params.get("x")}

        sink = Sink()
        handler({"x": 1}, sink)
        assert sink.calls == [(True, {"ok": True, "echo": 1}, None)]

    def test_none_params(self):
        @responds("test.ok", "Failed")
        def handler(params):
            return {"ok": True, "params": params}

        sink = Sink()
        handler(None, sink)
        assert sink.calls == [(True, {"ok": True, "params": {}}, None)]

    def test_domain_error_keeps_code(self):
        @responds("test.invalid", "Failed")
        def handler(params):
            raise InvalidRequestError("Missing job id")

        sink = Sink()
        handler({}, sink)
        assert sink.calls == [
            (False, None, {"code": "INVALID_REQUEST", "message": "Missing job id"})
        ]

    def test_unexpected_error_is_internal(self):
        @responds("test.broken", "Failed to do thing")
        def handler(params):
            raise KeyError("boom")

        sink = Sink()
        handler({}, sink)
        assert len(sink.calls) == 1
        ok, payload, error = sink.calls[0]
        assert ok is False
        assert payload is None
        assert error == {"code": "INTERNAL_ERROR", "message": "Failed to do thing: 'boom'"}

    def test_preserves_name(self):
        @responds("test.named", "Failed")
        def my_handler(params):
            return {}

        assert my_handler.__name__ == "my_handler"


class TestRespondsRobustness:
    """respond is still called once when inputs or configuration are off."""

    def test_unknown_log_level_still_responds(self, monkeypatch):
        """An unrecognized log level falls back to INFO instead of failing."""
        from missioncontrol.handlers import dispatch
        from missioncontrol.logger import get_logger, reset_logger

        monkeypatch.setenv("MISSION_CONTROL_LOG_LEVEL", "verbose")
        reset_logger()

        sink = Sink()
        dispatch("missionControl.list", {}, sink)

        assert sink.calls == [(True, {"ok": True, "jobs": []}, None)]
        assert get_logger().logger.level == 20

    def test_non_mapping_params_treated_as_empty(self):
        """Lists and strings carry no fields."""
        @responds("test.params", "Failed")
        def handler(params):
            return {"ok": True, "params": dict(params)}

        for params in (["x"], "oops", 42):
            sink = Sink()
            handler(params, sink)
            assert sink.calls == [(True, {"ok": True, "params": {}}, None)]

    def test_every_request_logged_at_debug(self, tmp_path, monkeypatch):
        """Each invocation leaves a DEBUG line naming the operation."""
        from missioncontrol.handlers import dispatch
        from missioncontrol.logger import reset_logger

        monkeypatch.setenv("MISSION_CONTROL_LOG_DIR", str(tmp_path / "logs"))
        reset_logger()

        dispatch("missionControl.get", {"id": "ghost"}, Sink())
        dispatch("missionControl.delete", {"id": ""}, Sink())

        content = next((tmp_path / "logs").glob("*.log")).read_text()
        assert "DEBUG    | missioncontrol" in content
        assert "missionControl.get requested" in content
        assert "missionControl.delete requested" in content
