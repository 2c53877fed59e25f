"""
Tests for CTP request framing and the response codec.
"""

import pytest

from ctp_calc import evaluate
from ctp_calc.models import ParseOutcome, ProtocolError, Status, format_result
from ctp_calc.protocol import (
    encode_request,
    frame_request,
    handle_request,
    parse_response,
    render_response,
)


class TestFraming:
    """Test request line validation."""

    def test_strips_terminator(self):
        assert frame_request(b"1+2\r\n") == "1+2"

    @pytest.mark.parametrize("data", [
        b"1+2\n",
        b"1+2",
        b"1+2\r",
        b"\r\n",
        b"\n",
        b"",
    ])
    def test_malformed(self, data):
        assert frame_request(data) is Status.MALFORMED_REQ

    def test_max_length_without_line_feed(self):
        assert frame_request(b"1" * 80) is Status.MAX_LENGTH_EXCEEDED

    def test_full_length_line_is_accepted(self):
        assert frame_request(b"1" * 78 + b"\r\n") == "1" * 78

    def test_full_length_needs_carriage_return(self):
        assert frame_request(b"1" * 79 + b"\n") is Status.MALFORMED_REQ

    def test_custom_limit(self):
        assert frame_request(b"12345", max_length=5) is Status.MAX_LENGTH_EXCEEDED
        assert frame_request(b"123\r\n", max_length=5) == "123"


class TestHandleRequest:
    """Test framing followed by evaluation."""

    def test_evaluates_valid_request(self):
        assert handle_request(b"(2+2)*3\r\n") == ParseOutcome(Status.OK, 12)

    def test_framing_error_skips_parser(self):
        assert handle_request(b"1/0") == ParseOutcome(Status.MALFORMED_REQ)

    def test_embedded_line_breaks_reach_parser(self):
        assert handle_request(b"1\r\n+2\r\n").result == 3

    def test_non_ascii_bytes_are_invalid(self):
        assert handle_request("1+é\r\n".encode("latin-1")).status is Status.INVALID_EXPR


class TestResponses:
    """Test rendering and decoding of responses."""

    def test_render_ok(self):
        assert render_response(ParseOutcome(Status.OK, 4)) == b"Status: ok\r\nResult: 4\r\n"

    def test_render_negative(self):
        assert render_response(ParseOutcome(Status.OK, -2)) == b"Status: ok\r\nResult: -2\r\n"

    def test_render_error_has_no_result(self):
        assert render_response(ParseOutcome(Status.MISMATCH)) == b"Status: mismatch\r\n"

    def test_render_result_past_int_str_digit_limit(self):
        outcome = evaluate("9" * 3000 + "*" + "9" * 3000)
        rendered = render_response(outcome)
        assert rendered.startswith(b"Status: ok\r\nResult: 9")
        assert rendered.endswith(b"8" + b"0" * 2999 + b"1\r\n")
        assert len(rendered.split(b"\r\n")[1]) == len("Result: ") + 6000

    @pytest.mark.parametrize("outcome", [
        ParseOutcome(Status.OK, -17),
        ParseOutcome(Status.INVALID_EXPR),
        ParseOutcome(Status.MAX_LENGTH_EXCEEDED),
    ])
    def test_parse_reads_rendered(self, outcome):
        assert parse_response(render_response(outcome)) == outcome

    @pytest.mark.parametrize("data", [
        b"Status: ok\r\n",
        b"Status: bogus\r\n",
        b"Hello\r\n",
        b"Status: ok\r\nResult: x\r\n",
        b"Status: ok\r\nResult: 4",
        b"Status: mismatch\r\nResult: 4\r\n",
        b"Status: ok\r\nResult: \xff\r\n",
    ])
    def test_parse_rejects_malformed(self, data):
        with pytest.raises(ProtocolError):
            parse_response(data)

    def test_encode_request(self):
        assert encode_request("1+2") == b"1+2\r\n"


class TestParseOutcome:
    """Test outcome construction rules."""

    def test_ok_requires_result(self):
        with pytest.raises(ValueError):
            ParseOutcome(Status.OK)

    def test_error_cannot_carry_result(self):
        with pytest.raises(ValueError):
            ParseOutcome(Status.MISMATCH, 3)

    def test_every_status_renders(self):
        assert [s.render() for s in Status] == [
            "ok", "mismatch", "invalid-expr", "max-length-exceeded", "malformed-req",
        ]

    def test_result_text(self):
        assert ParseOutcome(Status.OK, -42).result_text == "-42"
        assert ParseOutcome(Status.MISMATCH).result_text is None


class TestFormatResult:
    """Test decimal rendering of results of any size."""

    @pytest.mark.parametrize("value", [0, 7, -7, 10 ** 900, -(10 ** 900) + 1])
    def test_small_values_match_str(self, value):
        assert format_result(value) == str(value)

    def test_power_of_ten(self):
        assert format_result(10 ** 5000) == "1" + "0" * 5000
        assert format_result(-(10 ** 5000)) == "-1" + "0" * 5000

    def test_inner_chunks_keep_leading_zeros(self):
        assert format_result(10 ** 5000 + 7) == "1" + "0" * 4999 + "7"

    def test_all_nines(self):
        assert format_result(10 ** 12000 - 1) == "9" * 12000
