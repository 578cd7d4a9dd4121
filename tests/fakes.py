import httpx
from gallery.core.errors import ProbeError

class FakeProbe:
    """Stands in for ffprobe: returns a fixed duration or fails to decode."""

    def __init__(self, duration=30.0, fail=False):
        self.duration = duration
        self.fail = fail
        self.calls = []

    async def probe(self, path):
        self.calls.append(path)
        if self.fail:
            raise ProbeError("Invalid data found when processing input")
        return self.duration

class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def calls_to(self, host):
        return [r for r in self.requests if r.url.host == host]
