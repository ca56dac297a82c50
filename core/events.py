"""Events delivered by the file watcher"""


class FileChangeEvent:
    """A settled change of a watched file together with its new content"""
    def __init__(self, path, content):
        self.path = path
        self.content = content

    def __eq__(self, other):
        if not isinstance(other, FileChangeEvent):
            return NotImplemented
        return (self.path, self.content) == (other.path, other.content)

    def __repr__(self):
        return f"FileChangeEvent({self.path!r}, {len(self.content)} chars)"
