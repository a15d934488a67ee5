"""
test_udp_sender.py
Packet format and fan-out behaviour, with sockets replaced by mocks.
"""
import ipaddress
import json
import socket
import unittest
from unittest import mock

from wiz_ambilight.config import Config
from wiz_ambilight.errors import SendError
from wiz_ambilight.models import BulbAddress, ColorSample
from wiz_ambilight.packet_builder import PacketBuilder
from wiz_ambilight.udp_sender import UDPSender


def _addr(ip, port=38899):
    return BulbAddress(ipaddress.ip_address(ip), port)


def _decode(packet):
    return json.loads(packet.decode('utf-8'))


class TestPacketBuilder(unittest.TestCase):
    def setUp(self):
        self.pb = PacketBuilder(Config())

    def test_set_color(self):
        msg = _decode(self.pb.build_color(ColorSample(10, 20, 30)))
        self.assertEqual(msg, {'method': 'setPilot', 'params': {'r': 10, 'g': 20, 'b': 30, 'dimming': 100}})

    def test_black_is_sent_as_dimmest_colour(self):
        msg = _decode(self.pb.build_color(ColorSample(0, 0, 0)))
        self.assertEqual(msg['params'], {'r': 1, 'g': 1, 'b': 1, 'dimming': 100})
        # Only the all-zero triple is raised
        msg = _decode(self.pb.build_color(ColorSample(0, 0, 5)))
        self.assertEqual((msg['params']['r'], msg['params']['g'], msg['params']['b']), (0, 0, 5))

    def test_restore(self):
        self.assertEqual(_decode(self.pb.build_restore()), {'method': 'setPilot', 'params': {'state': True}})

    def test_state_query(self):
        self.assertEqual(_decode(self.pb.build_state_query()), {'method': 'getPilot', 'params': {}})

    def test_restore_from_colour_state(self):
        reply = {'method': 'getPilot', 'env': 'pro',
                 'result': {'mac': 'a8bb50000000', 'rssi': -60, 'state': True,
                            'sceneId': 0, 'r': 255, 'g': 80, 'b': 0, 'dimming': 40}}
        msg = _decode(self.pb.build_restore_from_state(json.dumps(reply).encode()))
        self.assertEqual(msg['params'], {'r': 255, 'g': 80, 'b': 0, 'dimming': 40, 'state': True})

    def test_restore_from_white_state(self):
        reply = {'result': {'state': False, 'temp': 2700, 'dimming': 75}}
        msg = _decode(self.pb.build_restore_from_state(reply))
        self.assertEqual(msg['params'], {'temp': 2700, 'dimming': 75, 'state': False})

    def test_unusable_state_falls_back_to_generic_restore(self):
        for reply in (b'not json', {'error': {'code': -32600}}, {'result': {'sceneId': 4}}):
            with mock.patch('builtins.print'):
                packet = self.pb.build_restore_from_state(reply)
            self.assertEqual(packet, self.pb.build_restore())


class TestUDPSender(unittest.TestCase):
    def setUp(self):
        self.sock = mock.MagicMock()
        patcher = mock.patch('socket.socket', return_value=self.sock)
        self.socket_ctor = patcher.start()
        self.addCleanup(patcher.stop)
        self.sender = UDPSender(Config())

    def test_no_socket_until_first_send(self):
        self.socket_ctor.assert_not_called()
        self.sender.dispatch(ColorSample(1, 2, 3), [])
        self.socket_ctor.assert_not_called()

    def test_dispatch_one_datagram_per_address(self):
        addresses = [_addr('10.0.0.1'), _addr('10.0.0.2'), _addr('10.0.0.3')]
        outcomes = self.sender.dispatch(ColorSample(10, 20, 30), addresses)
        self.assertEqual(self.sock.sendto.call_count, 3)
        payloads = [c.args[0] for c in self.sock.sendto.call_args_list]
        targets = [c.args[1] for c in self.sock.sendto.call_args_list]
        self.assertEqual(len(set(payloads)), 1)
        self.assertEqual(targets, [('10.0.0.1', 38899), ('10.0.0.2', 38899), ('10.0.0.3', 38899)])
        self.assertEqual([o.address for o in outcomes], addresses)
        self.assertTrue(all(o.ok for o in outcomes))

    def test_send_failure_does_not_stop_other_bulbs(self):
        addresses = [_addr('10.0.0.1'), _addr('10.0.0.2'), _addr('10.0.0.3')]
        self.sock.sendto.side_effect = [None, OSError('Network is unreachable'), None]
        with mock.patch('builtins.print'):
            outcomes = self.sender.dispatch(ColorSample(1, 1, 1), addresses)
        self.assertEqual(self.sock.sendto.call_count, 3)
        self.assertEqual([o.ok for o in outcomes], [True, False, True])
        self.assertIsInstance(outcomes[1].error, SendError)
        self.assertEqual(outcomes[1].error.address, addresses[1])

    def test_ipv6_uses_its_own_socket(self):
        self.sender.dispatch(ColorSample(1, 2, 3), [_addr('10.0.0.1'), _addr('::1'), _addr('10.0.0.2')])
        families = [c.args[0] for c in self.socket_ctor.call_args_list]
        self.assertEqual(families, [socket.AF_INET, socket.AF_INET6])

    def test_restore_one_per_address(self):
        addresses = [_addr('10.0.0.1'), _addr('10.0.0.2')]
        snapshots = {addresses[0]: {'result': {'state': True, 'temp': 4000, 'dimming': 50}}}
        outcomes = self.sender.restore(addresses, snapshots)
        self.assertEqual(len(outcomes), 2)
        sent = [_decode(c.args[0]) for c in self.sock.sendto.call_args_list]
        self.assertEqual(sent[0]['params'], {'temp': 4000, 'dimming': 50, 'state': True})
        self.assertEqual(sent[1]['params'], {'state': True})

    def test_snapshot_collects_replies_until_timeout(self):
        self.sock.__enter__.return_value = self.sock
        reply = {'method': 'getPilot', 'result': {'state': True, 'r': 1, 'g': 2, 'b': 3, 'dimming': 10}}
        self.sock.recvfrom.side_effect = [
            (json.dumps(reply).encode(), ('10.0.0.2', 38899)),
            (b'{}', ('10.9.9.9', 38899)),
            socket.timeout(),
        ]
        addresses = [_addr('10.0.0.1'), _addr('10.0.0.2')]
        with mock.patch('builtins.print'):
            states = self.sender.snapshot_states(addresses, timeout=0.5)
        self.assertEqual(list(states), [addresses[1]])
        self.assertEqual(states[addresses[1]], reply)
        queries = [_decode(c.args[0]) for c in self.sock.sendto.call_args_list]
        self.assertEqual(queries, [{'method': 'getPilot', 'params': {}}] * 2)

    def test_snapshot_matches_link_local_ipv6_reply_with_scope(self):
        self.sock.__enter__.return_value = self.sock
        reply = {'result': {'state': True, 'temp': 3000, 'dimming': 60}}
        self.sock.recvfrom.side_effect = [
            (json.dumps(reply).encode(), ('fe80::1%eth0', 38899, 0, 2)),
            socket.timeout(),
        ]
        address = _addr('fe80::1')
        with mock.patch('builtins.print'):
            states = self.sender.snapshot_states([address], timeout=0.5)
        self.assertEqual(states, {address: reply})
        self.assertEqual(self.socket_ctor.call_args.args[0], socket.AF_INET6)

    def test_debug_print_is_rate_limited(self):
        cfg = Config()
        cfg.debug_udp_packets = True
        sender = UDPSender(cfg)
        with mock.patch('builtins.print') as p, mock.patch('time.time', return_value=100.0):
            sender.dispatch(ColorSample(1, 2, 3), [_addr('10.0.0.1'), _addr('10.0.0.2')])
        self.assertEqual(p.call_count, 1)


if __name__ == '__main__':
    unittest.main()
