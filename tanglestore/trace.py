"""Per-request step trace.

A `StepTrace` is opened around one request. Each `step()` is logged right away
and kept, and leaving the block always logs a summary, whether the request
succeeded or not. The kept lines are appended to failure messages.
"""
import logging
import time
from typing import List, Optional


class StepTrace:
    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.records: List[dict] = []
        self._start = None

    def __enter__(self):
        self._start = time.monotonic()
        self.records = []
        return self

    def step(self, name: str, message: str = '', *args, level: int = logging.INFO):
        text = message % args if args else message
        rec = {'step': name, 'message': text, 'elapsed_ms': self.elapsed_ms()}
        self.records.append(rec)
        self.logger.log(level, '%s %s: %s', self.operation, name, text,
                        extra={'step': name, 'elapsed_ms': rec['elapsed_ms']})
        return rec

    def elapsed_ms(self) -> int:
        if self._start is None:
            return 0
        return int((time.monotonic() - self._start) * 1000)

    def lines(self) -> List[str]:
        out = [self.operation]
        for r in self.records:
            line = f"[{r['elapsed_ms']}ms] {r['step']}"
            if r['message']:
                line += f": {r['message']}"
            out.append(line)
        return out

    def render(self) -> str:
        return '\n'.join(self.lines())

    def __exit__(self, exc_type, exc, tb):
        if exc is None:
            self.logger.info('%s completed in %sms (%s steps)', self.operation, self.elapsed_ms(), len(self.records))
        else:
            self.logger.warning('%s failed after %sms at %s: %s', self.operation, self.elapsed_ms(),
                                self.records[-1]['step'] if self.records else 'start', exc)
        return False
