"""
packet_builder.py
Builds the JSON datagrams understood by WiZ bulbs on UDP port 38899.
"""
import json

SET_PILOT = 'setPilot'
GET_PILOT = 'getPilot'


def _encode(method, params):
    return json.dumps({'method': method, 'params': params}, separators=(',', ':')).encode('utf-8')


class PacketBuilder:
    def __init__(self, config):
        self.config = config

    def build_color(self, color):
        r, g, b = (max(0, min(255, int(c))) for c in color.as_tuple())
        if (r, g, b) == (0, 0, 0):
            # Bulbs reject an all-zero colour, send the dimmest one instead
            r, g, b = 1, 1, 1
        return _encode(SET_PILOT, {'r': r, 'g': g, 'b': b, 'dimming': int(self.config.dimming)})

    def build_restore(self):
        # Generic "turn back on"; the bulb resumes its own previous scene
        return _encode(SET_PILOT, {'state': True})

    def build_state_query(self):
        return _encode(GET_PILOT, {})

    def build_restore_from_state(self, reply):
        """
        Replay a getPilot reply captured before the loop started.
        White mode replays temp/dimming/state, colour mode replays r/g/b/dimming/state.
        Falls back to the generic restore if the reply is not usable.
        """
        try:
            if isinstance(reply, (bytes, bytearray)):
                reply = reply.decode('utf-8')
            if isinstance(reply, str):
                reply = json.loads(reply)
            result = reply['result']
            if 'temp' in result:
                params = {
                    'temp': int(result['temp']),
                    'dimming': int(result['dimming']),
                    'state': bool(result['state']),
                }
            else:
                params = {
                    'r': int(result['r']),
                    'g': int(result['g']),
                    'b': int(result['b']),
                    'dimming': int(result['dimming']),
                    'state': bool(result['state']),
                }
        except (ValueError, KeyError, TypeError) as e:
            print(f"Unusable bulb state {reply!r} ({e}), sending generic restore")
            return self.build_restore()
        return _encode(SET_PILOT, params)
