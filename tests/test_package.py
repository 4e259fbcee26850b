"""Package layout checks."""

from pathlib import Path

import palette_gif


def test_modules_start_with_their_path():
    pkg = Path(palette_gif.__file__).parent
    for path in sorted(pkg.glob("*.py")):
        first = path.read_text(encoding="utf-8").splitlines()[0]
        assert first == f"# palette_gif/{path.name}"
