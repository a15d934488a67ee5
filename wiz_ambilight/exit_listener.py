"""
exit_listener.py
Background keyboard listener that sets the shared stop event when the exit key is pressed.
"""
import threading


class ExitListener:
    def __init__(self, stop_event: threading.Event, key: str = 'esc'):
        self.stop_event = stop_event
        self.key = key
        self._listener = None

    def matches(self, key) -> bool:
        """True if a pynput key object is the exit key ('esc' style names or single characters)."""
        name = getattr(key, 'name', None)
        if name is not None and name == self.key:
            return True
        char = getattr(key, 'char', None)
        return char is not None and char == self.key

    def on_press(self, key):
        if self.matches(key):
            self.stop_event.set()
            # Returning False stops the pynput listener thread
            return False
        return None

    def start(self):
        # pynput picks its backend on import and fails without a display
        from pynput import keyboard

        self._listener = keyboard.Listener(on_press=self.on_press)
        self._listener.daemon = True
        self._listener.start()
        return self

    def stop(self):
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
