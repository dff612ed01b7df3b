import os

import pytest

from mongo_migrator.exceptions import InputStreamError, SubprocessFailure
from mongo_migrator.models import is_affirmative

SERVER_KEYS = ["host", "port", "username", "password", "db", "collection"]


class FakeTerminal:
    """Terminal that replays scripted answers and records everything shown."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.lines = []
        self.prompts_read = 0

    def write_line(self, text, style="white"):
        self.lines.append((text, style))

    def read_line(self, prompt=""):
        if not self.answers:
            raise InputStreamError("Input stream closed before all questions were answered")
        self.prompts_read += 1
        return self.answers.pop(0)

    @property
    def text(self):
        return "\n".join(text for text, _ in self.lines)


class FakeRunner:
    """Records commands instead of running them; writes the export file like mongoexport would."""

    def __init__(self, fail_when=None):
        self.calls = []
        self.fail_when = fail_when or (lambda cmd: False)

    def run(self, cmd):
        self.calls.append(cmd)
        if self.fail_when(cmd):
            raise SubprocessFailure(cmd, 1, "connection refused")
        if "--out" in cmd:
            with open(cmd[cmd.index("--out") + 1], "w") as f:
                f.write('{"_id": 1}\n')
        return ""

    @property
    def exports(self):
        return [cmd for cmd in self.calls if cmd[0] == "mongoexport"]

    @property
    def imports(self):
        return [cmd for cmd in self.calls if cmd[0] == "mongoimport"]


def arg(cmd, flag):
    return cmd[cmd.index(flag) + 1]


@pytest.fixture
def answer_script():
    """Build the answers for the default question list, in the order they are asked."""
    def build(origin, will_import="", destination=None, keep_backup=""):
        script = [origin.get(key, "") for key in SERVER_KEYS]
        script.append(will_import)
        if is_affirmative(will_import):
            script.extend((destination or {}).get(key, "") for key in SERVER_KEYS)
        script.append(keep_backup)
        return script
    return build


@pytest.fixture
def temp_dir(tmp_path):
    return os.path.join(str(tmp_path), "temp")
