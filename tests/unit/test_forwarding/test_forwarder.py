"""
Unit tests for the forwarder.

Tests that each tick's pending content is submitted exactly once, that an
unreachable log sink drops the transmission without raising, and that empty
ticks send nothing.
"""

from unittest.mock import Mock

import pytest

from procnetlog.forwarding import Forwarder, ForwardResult, SocketTransport, SyslogTransport
from procnetlog.sampling import AccumulationBuffer
from procnetlog.validation import TransportError


@pytest.fixture
def transport():
    mock_transport = Mock(spec=SyslogTransport)
    mock_transport.tag = "SAVE_PROC_NET"
    mock_transport.name = "mock"
    return mock_transport


@pytest.fixture
def buffer(temp_dir):
    return AccumulationBuffer(temp_dir / "p2log_test")


@pytest.mark.unit
class TestForwarder:
    """Test cases for Forwarder.forward."""

    def test_sends_pending_lines(self, transport, buffer):
        buffer.append("/proc/net/dev a\n/proc/net/snmp b\n")

        result = Forwarder(transport).forward(buffer)

        assert result == ForwardResult.SENT
        transport.send.assert_called_once_with(["/proc/net/dev a", "/proc/net/snmp b"])
        assert buffer.pending() == ""

    def test_blank_lines_are_not_sent(self, transport, buffer):
        buffer.append("a\n\n   \nb\n")
        Forwarder(transport).forward(buffer)
        transport.send.assert_called_once_with(["a", "b"])

    def test_custom_delimiter(self, transport, buffer):
        buffer.append("a b\x1ec d\x1e")
        Forwarder(transport, delimiter="\x1e").forward(buffer)
        transport.send.assert_called_once_with(["a b", "c d"])

    def test_empty_tick_sends_nothing(self, transport, buffer):
        result = Forwarder(transport).forward(buffer)

        assert result == ForwardResult.EMPTY
        transport.send.assert_not_called()

    def test_transport_failure_drops_transmission(self, transport, buffer, caplog):
        transport.send.side_effect = TransportError("sink unavailable", transport="mock")
        buffer.append("tick one\n")

        result = Forwarder(transport).forward(buffer)

        assert result == ForwardResult.DROPPED
        assert "Dropping transmission" in caplog.text
        # Dropped content is not retried with the next tick.
        assert buffer.pending() == ""

    def test_each_tick_sent_once(self, transport, buffer):
        forwarder = Forwarder(transport)
        for tick in ("one\n", "two\n", "three\n"):
            buffer.append(tick)
            forwarder.forward(buffer)

        sent = [call.args[0] for call in transport.send.call_args_list]
        assert sent == [["one"], ["two"], ["three"]]

    def test_unexpected_error_propagates_and_retires_content(self, transport, buffer):
        transport.send.side_effect = RuntimeError("boom")
        buffer.append("tick\n")

        with pytest.raises(RuntimeError):
            Forwarder(transport).forward(buffer)
        assert buffer.pending() == ""

    def test_large_file_does_not_drop_tick(self, buffer, syslog_sink):
        """A statistics file bigger than a datagram is delivered along with the rest."""
        tcp_line = "a_tcp " + "sl local_address rem_address st " * 10000
        buffer.append(tcp_line + "\nz_snmp Ip: 1 64\n")
        transport = SocketTransport(tag="SAVE_PROC_NET", address=str(syslog_sink.path))

        result = Forwarder(transport).forward(buffer)

        assert result == ForwardResult.SENT
        messages = syslog_sink.received(settle=1.0)
        assert messages[-1] == "<14>SAVE_PROC_NET: z_snmp Ip: 1 64\x00"
        assert len(messages) > 2
