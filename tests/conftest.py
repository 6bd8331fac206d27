"""
pytest configuration and fixtures for exifsort tests.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import pytest
from rich.console import Console


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str


XMP_TEMPLATE = """<?xpacket begin="" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about=""
    xmlns:xmp="http://ns.adobe.com/xap/1.0/"
    xmlns:photoshop="http://ns.adobe.com/photoshop/1.0/"
    xmlns:exif="http://ns.adobe.com/exif/1.0/"
    {attributes}>
   {elements}
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


def make_xmp(attributes: Dict[str, str] = None, elements: Dict[str, str] = None) -> str:
    """Build an XMP packet with the given prefixed properties.

    Attributes go on rdf:Description; elements become simple child elements.
    """
    attrs = " ".join(f'{name}="{value}"' for name, value in (attributes or {}).items())
    elems = "\n   ".join(f"<{name}>{value}</{name}>" for name, value in (elements or {}).items())
    return XMP_TEMPLATE.format(attributes=attrs, elements=elems)


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers the CLI attached to the program logger during a test."""
    yield
    logger = logging.getLogger("exifsort")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def xmp_packet():
    """Factory for XMP packets, see make_xmp."""
    return make_xmp


@pytest.fixture
def fake_exiftool(monkeypatch):
    """Replace the exiftool subprocess with canned JSON keyed by file name."""

    def install(metadata_by_name: Dict[str, Union[dict, Exception]]) -> List[Path]:
        """Install canned exiftool output.

        Args:
            metadata_by_name: file name -> exiftool ``-G1`` JSON object, or an
                exception to raise for that file. Unlisted files have no tags.

        Returns:
            List that collects every path exiftool was run on
        """
        calls = []

        def run_exiftool(file_path: Path) -> dict:
            calls.append(file_path)
            data = metadata_by_name.get(file_path.name, {})
            if isinstance(data, Exception):
                raise data
            return {"SourceFile": str(file_path), **data}

        monkeypatch.setattr("exifsort.metadata.exiftool_available", lambda: True)
        monkeypatch.setattr("exifsort.cli.exiftool_available", lambda: True)
        monkeypatch.setattr("exifsort.metadata.run_exiftool", run_exiftool)
        return calls

    return install


@pytest.fixture
def test_config_path(tmp_path):
    """Test-specific config path, never the user's real config."""
    return tmp_path / "config" / "config.yml"


@pytest.fixture
def cli_runner(monkeypatch):
    """Create a CLI runner that captures console output."""

    def run_cli(*args, config_path=None) -> CliResult:
        """Run exifsort CLI with given arguments.

        Args:
            *args: Command line arguments (source, dest, --flags, etc)
            config_path: Optional config path for test isolation
        """
        from exifsort.cli import main

        output = io.StringIO()
        # Wide console so long temporary paths are not wrapped
        monkeypatch.setattr("exifsort.constants._console", Console(file=output, width=400))

        try:
            exit_code = main([str(a) for a in args], config_path=config_path)
        except SystemExit as e:
            # argparse errors and --help
            exit_code = e.code if e.code is not None else 0

        return CliResult(exit_code=exit_code, output=output.getvalue())

    return run_cli


@pytest.fixture
def create_test_files(tmp_path):
    """Helper to create test files with specific properties."""

    def create_files(file_specs: List[dict], root: str = "source") -> Path:
        """Create test files based on specifications.

        Args:
            file_specs: List of dicts with keys:
                - name: path relative to the root directory
                - content: file content (optional)
            root: Name of the directory created under tmp_path

        Returns:
            Path to directory containing created files
        """
        test_dir = tmp_path / root
        test_dir.mkdir(exist_ok=True)

        for spec in file_specs:
            file_path = test_dir / spec['name']
            file_path.parent.mkdir(parents=True, exist_ok=True)

            content = spec.get('content', b'test file content')
            if isinstance(content, str):
                file_path.write_text(content)
            else:
                file_path.write_bytes(content)

        return test_dir

    return create_files


@pytest.fixture
def assert_file_structure():
    """Helper to assert expected file structure."""

    def check_structure(base_path: Path, expected_structure: dict):
        """Assert that directory has expected structure.

        Args:
            base_path: Root directory to check
            expected_structure: Dict describing expected structure
                e.g., {
                    "2024": {
                        "05-15": ["file1.jpg", "file2.jpg"],
                    },
                    "0000": ["undated.mp4"],
                }
        """
        def check_level(path: Path, structure: dict):
            for name, value in structure.items():
                item_path = path / name
                assert item_path.exists(), f"Expected {item_path} to exist"

                if isinstance(value, dict):
                    assert item_path.is_dir(), f"Expected {item_path} to be a directory"
                    check_level(item_path, value)
                elif isinstance(value, list):
                    assert item_path.is_dir(), f"Expected {item_path} to be a directory"
                    actual_files = sorted([f.name for f in item_path.iterdir() if f.is_file()])
                    expected_files = sorted(value)
                    assert actual_files == expected_files, \
                        f"Expected files {expected_files} in {item_path}, got {actual_files}"

        check_level(base_path, expected_structure)

    return check_structure
