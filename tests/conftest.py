"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest


@pytest.fixture
def simple_diff_content() -> str:
    """A single-file git diff adding three lines at 10-12."""
    return """diff --git a/pkg/foo.go b/pkg/foo.go
index 1111111111111111111111111111111111111111..2222222222222222222222222222222222222222 100644
--- a/pkg/foo.go
+++ b/pkg/foo.go
@@ -8,4 +8,7 @@ func Foo() {
 	a := 1
 	b := 2
+	c := 3
+	d := 4
+	e := 5
 	return a + b
 }
"""


@pytest.fixture
def multi_file_diff_content() -> str:
    """A diff touching a Go file, a README, a deleted file and a rename."""
    # Context lines start with exactly one space, the diff marker.
    lines = [
        "diff --git a/pkg/foo.go b/pkg/foo.go",
        "index 1111111..2222222 100644",
        "--- a/pkg/foo.go",
        "+++ b/pkg/foo.go",
        "@@ -1,2 +1,3 @@ package pkg",
        " package pkg",
        "-func Old() {}",
        "+func New() {}",
        "+func Other() {}",
        "diff --git a/README.md b/README.md",
        "index 3333333..4444444 100644",
        "--- a/README.md",
        "+++ b/README.md",
        "@@ -1 +1,2 @@",
        " # Title",
        "+More text",
        "diff --git a/pkg/gone.go b/pkg/gone.go",
        "deleted file mode 100644",
        "index 5555555..0000000",
        "--- a/pkg/gone.go",
        "+++ /dev/null",
        "@@ -1,2 +0,0 @@",
        "-package pkg",
        "-var x = 1",
        "diff --git a/pkg/old name.go b/pkg/new name.go",
        "similarity index 90%",
        "rename from pkg/old name.go",
        "rename to pkg/new name.go",
        "index 6666666..7777777 100644",
        "--- a/pkg/old name.go",
        "+++ b/pkg/new name.go",
        "@@ -3,1 +3,1 @@",
        "-var y = 1",
        "+var y = 2",
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def profile_content() -> str:
    """A set-mode profile covering pkg/foo.go."""
    return "\n".join([
        "mode: set",
        "github.com/acme/widgets/pkg/foo.go:1.1,2.10 1 1",
        "github.com/acme/widgets/pkg/foo.go:10.2,10.12 1 1",
        "github.com/acme/widgets/pkg/foo.go:11.2,12.12 2 0",
        "github.com/acme/widgets/pkg/bar.go:5.1,7.2 3 4",
    ]) + "\n"


@pytest.fixture
def profile_file(tmp_path: Path, profile_content: str) -> Path:
    """Write the profile fixture to disk."""
    path = tmp_path / "output.txt"
    path.write_text(profile_content, encoding="utf-8")
    return path
