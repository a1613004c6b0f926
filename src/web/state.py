import threading
import time


class SharedState:
    """
    Singleton class to share state between the main processing loop
    and the FastAPI web server.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance._init_state()
        return cls._instance

    def _init_state(self):
        self.state_lock = threading.Lock()
        self.subjects = []
        self.subjects_ts = None
        self.dispatcher = None
        self.config = None
        self.system_stats = {
            "fps": 0,
            "frame_count": 0,
            "start_time": time.time(),
            "last_frame_ts": None,
        }

    def reset(self):
        """Drop all runtime state (used between test runs)."""
        with self.state_lock:
            self._init_state()

    def set_subjects(self, subjects):
        """Replace the current subject snapshot."""
        with self.state_lock:
            self.subjects = list(subjects)
            self.subjects_ts = time.time()

    def get_subjects(self):
        with self.state_lock:
            return list(self.subjects)

    def set_dispatcher(self, dispatcher):
        self.dispatcher = dispatcher

    def set_config(self, config):
        with self.state_lock:
            self.config = config

    def get_config(self):
        with self.state_lock:
            return self.config

    def update_system_stats(self, stats):
        with self.state_lock:
            self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        with self.state_lock:
            return dict(self.system_stats)


# Global instance
state = SharedState()
