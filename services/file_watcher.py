"""File watching services"""
import os
import hashlib
import threading

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from config import FILE_WATCHER_DEBOUNCE_MS
from core.events import FileChangeEvent
from core.errors import FileReadError
from services.env_io import read_text
from utils.logging_setup import get_logger

logger = get_logger("file_watcher")


def _path_key(path):
    return os.path.normcase(os.path.abspath(path))


def _content_hash(content):
    return hashlib.md5(content.encode("utf-8", errors="surrogatepass")).hexdigest()


class FileWatcher:
    """Watch a set of files and deliver one FileChangeEvent per settled change"""
    def __init__(self, paths, callback, debounce_ms=FILE_WATCHER_DEBOUNCE_MS):
        self.paths = list(paths)
        self.event_handler = FileEventHandler(self.paths, callback, debounce_ms)
        self.observer = Observer()
        self._running = False

    def start(self):
        if self._running:
            return
        # Baseline first so the first real change is compared against current content
        self.event_handler.preload_file_hashes()

        # watchdog watches directories; the handler filters down to our files
        directories = sorted({os.path.dirname(os.path.abspath(p)) for p in self.paths})
        for directory in directories:
            self.observer.schedule(self.event_handler, directory, recursive=False)
        self.observer.start()
        self._running = True
        logger.info(f"Watching {len(self.paths)} file(s) in {len(directories)} folder(s)")

    def stop(self):
        self.event_handler.stop()
        self.stop_observer()
        self._running = False

    def stop_observer(self):
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()
            logger.debug("Observer stopped.")

    def record_content(self, path, content):
        """Remember content we wrote ourselves so its echo is not reported."""
        self.event_handler.record_content(path, content)

    @property
    def is_running(self):
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


class FileEventHandler(FileSystemEventHandler):
    """
    Debounce raw watchdog events per path.

    Every raw event restarts the path's timer; when the timer fires the file is
    read and, if its content hash changed, the callback receives a
    FileChangeEvent. Emission for one path is serialized by a per-path lock.
    """
    def __init__(self, paths, callback, debounce_ms=FILE_WATCHER_DEBOUNCE_MS):
        super().__init__()
        self.watched = {_path_key(p): p for p in paths}
        self.callback = callback
        self.debounce_seconds = debounce_ms / 1000.0
        self.file_hashes = {}  # last known content hash per watched path
        self._timers = {}
        self._generations = {}
        self._timers_lock = threading.Lock()
        # Reentrant: a callback may save, and saving records content under the same lock
        self._path_locks = {key: threading.RLock() for key in self.watched}
        self._stopped = False

    def preload_file_hashes(self):
        for key, path in self.watched.items():
            try:
                self.file_hashes[key] = _content_hash(read_text(path))
            except FileReadError as e:
                logger.warning(f"Cannot capture baseline: {e}")

    def record_content(self, path, content):
        key = _path_key(path)
        if key in self.watched:
            with self._path_locks[key]:
                self.file_hashes[key] = _content_hash(content)

    def on_modified(self, event):
        if event.is_directory:
            return
        self.schedule_path(event.src_path)

    def on_created(self, event):
        if event.is_directory:
            return
        self.schedule_path(event.src_path)

    def on_moved(self, event):
        # Editors often save by renaming a temp file over the original
        if event.is_directory:
            return
        self.schedule_path(event.dest_path)

    def on_deleted(self, event):
        if event.is_directory:
            return
        key = _path_key(event.src_path)
        if key in self.watched:
            logger.info(f"File deleted: {self.watched[key]}")

    def schedule_path(self, path):
        """Start or restart the debounce timer of a watched path."""
        key = _path_key(path)
        if key not in self.watched:
            return
        with self._timers_lock:
            if self._stopped:
                return
            pending = self._timers.pop(key, None)
            if pending is not None:
                pending.cancel()
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            timer = threading.Timer(self.debounce_seconds, self._flush, args=(key, generation))
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _flush(self, key, generation):
        with self._timers_lock:
            if self._stopped or self._generations.get(key) != generation:
                return  # superseded by a later event
            self._timers.pop(key, None)

        path = self.watched[key]
        with self._path_locks[key]:
            try:
                content = read_text(path)
            except FileReadError as e:
                logger.warning(f"Skipping change event: {e}")
                return

            new_hash = _content_hash(content)
            if self.file_hashes.get(key) == new_hash:
                logger.debug(f"Content unchanged for {path}")
                return
            self.file_hashes[key] = new_hash

            try:
                self.callback(FileChangeEvent(path, content))
            except Exception:
                logger.exception(f"Change handler failed for {path}")

    def stop(self):
        with self._timers_lock:
            self._stopped = True
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
