"""In-memory live stream registry keyed by stream id."""

from collections import defaultdict
from collections.abc import Iterator

from .live_models import LiveStream


def _discard(index: defaultdict[str, set[str]], key: str, value: str) -> None:
    values = index.get(key)
    if values is None:
        return
    values.discard(value)
    if not values:
        del index[key]


class StreamRegistry:
    """Owns every live stream and its viewer set.

    Two secondary indexes mirror the records: connections hosting streams and
    connections watching streams. Both are updated by every mutation so a
    disconnect touches only the streams that involve that connection.
    """

    def __init__(self):
        self._streams: dict[str, LiveStream] = {}
        self._hosting: defaultdict[str, set[str]] = defaultdict(set)
        self._viewing: defaultdict[str, set[str]] = defaultdict(set)

    def add(self, stream: LiveStream) -> None:
        self._streams[stream.stream_id] = stream
        self._hosting[stream.host_connection_id].add(stream.stream_id)
        for viewer in stream.viewers:
            self._viewing[viewer].add(stream.stream_id)

    def get(self, stream_id: str) -> LiveStream | None:
        return self._streams.get(stream_id)

    def remove(self, stream_id: str) -> LiveStream | None:
        stream = self._streams.pop(stream_id, None)
        if stream is None:
            return None
        _discard(self._hosting, stream.host_connection_id, stream_id)
        for viewer in stream.viewers:
            _discard(self._viewing, viewer, stream_id)
        return stream

    def add_viewer(self, stream_id: str, connection_id: str) -> bool:
        """Returns True only if the viewer was not already in the set."""
        stream = self._streams.get(stream_id)
        if stream is None or connection_id in stream.viewers:
            return False
        stream.viewers.add(connection_id)
        self._viewing[connection_id].add(stream_id)
        return True

    def remove_viewer(self, stream_id: str, connection_id: str) -> bool:
        """Returns True only if the viewer was in the set."""
        stream = self._streams.get(stream_id)
        if stream is None or connection_id not in stream.viewers:
            return False
        stream.viewers.discard(connection_id)
        _discard(self._viewing, connection_id, stream_id)
        return True

    def hosted_by(self, connection_id: str) -> list[str]:
        return list(self._hosting.get(connection_id, ()))

    def viewed_by(self, connection_id: str) -> list[str]:
        return list(self._viewing.get(connection_id, ()))

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._streams

    def __len__(self) -> int:
        return len(self._streams)

    def __iter__(self) -> Iterator[LiveStream]:
        return iter(list(self._streams.values()))
