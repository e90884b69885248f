from toolrpc.api.rpc.envelope import rpc_error
from toolrpc.api.rpc.error_boundary import (
    missing_params_result,
    rpc_error_result,
    unhandled_exception_result,
    unknown_method_result,
)
from toolrpc.utils.exceptions import RpcError


def test_unknown_method_result():
    res = unknown_method_result(method="x.y", rpc_error=rpc_error)
    assert res[0] is False
    assert res[2]["code"] == -32601
    assert "x.y" in res[2]["message"]


def test_missing_params_result_lists_fields():
    res = missing_params_result(method="sendEmail", missing=["body", "to"], rpc_error=rpc_error)
    assert res == (
        False,
        None,
        {"code": -32602, "message": "Invalid params for sendEmail: missing required parameter(s): body, to"},
    )


def test_rpc_error_result_logs_and_forwards():
    calls = []
    res = rpc_error_result(
        method="abc",
        exc=RpcError(-32001, "authentication required"),
        log_warning=lambda fmt, m, code, msg: calls.append((m, code, msg)),
        rpc_error=rpc_error,
    )
    assert res == (False, None, {"code": -32001, "message": "authentication required"})
    assert calls == [("abc", -32001, "authentication required")]


def test_unhandled_exception_result_logs_and_maps():
    calls = []
    res = unhandled_exception_result(
        method="abc",
        exc=RuntimeError("boom"),
        log_exception=lambda fmt, m, label, msg: calls.append((m, label)),
        rpc_error=rpc_error,
    )
    assert res[0] is False
    assert res[2]["code"] == -32603
    assert "boom" in res[2]["message"]
    assert calls == [("abc", "unexpected")]


def test_unhandled_exception_without_message_uses_type_name():
    res = unhandled_exception_result(
        method="abc",
        exc=KeyError(),
        log_exception=lambda *_: None,
        rpc_error=rpc_error,
    )
    assert "KeyError" in res[2]["message"]
