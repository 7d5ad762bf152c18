import threading
import time


class SharedState:
    """
    Singleton class to share state between the main processing loop
    and the web server.

    The loop publishes immutable snapshots; the web side only reads them.
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
        self.result_lock = threading.Lock()
        self.config = None
        self._init_state_values()

    def publish(self, result, report=None):
        """Store the latest frame result (and optionally the report)."""
        now = time.time()
        with self.result_lock:
            last = self.system_stats["last_frame_ts"]
            if last is not None and now > last:
                instant = 1.0 / (now - last)
                # Exponential smoothing
                self.system_stats["fps"] = 0.9 * self.system_stats["fps"] + 0.1 * instant
            self.latest_result = result
            if report is not None:
                self.latest_report = report
            self.system_stats["frame_count"] += 1
            self.system_stats["last_frame_ts"] = now

    def get_latest_result(self):
        with self.result_lock:
            return self.latest_result

    def get_report(self):
        with self.result_lock:
            return self.latest_report

    def set_config(self, config):
        self.config = config

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        with self.result_lock:
            return dict(self.system_stats)

    def reset(self):
        """Clear everything published so far."""
        with self.result_lock:
            self._init_state_values()

    def _init_state_values(self):
        self.latest_result = None
        self.latest_report = None
        self.system_stats = {
            "fps": 0.0,
            "frame_count": 0,
            "start_time": time.time(),
            "last_frame_ts": None,
        }


# Global instance
state = SharedState()
