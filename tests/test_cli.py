"""
Test the command line: options, config-file defaults, and exit codes.
"""

import pytest

from exifmv import __version__


def files_under(root):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class TestBasicOperations:
    """Test fundamental exifmv runs through the CLI."""

    def test_move(self, cli_runner, make_media, source_dir, dest_dir, test_config_path):
        make_media(source_dir / "IMG_0001.ARW", "2023:07:14 12:30:00")

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 0
        assert "Processing completed" in result.output
        assert files_under(dest_dir) == ["2023/07/14/IMG_0001.ARW"]

    def test_dry_run_mode(self, cli_runner, make_media, source_dir, dest_dir, test_config_path):
        make_media(source_dir / "a.jpg")
        make_media(source_dir / "sub" / "b.jpg")
        before = files_under(source_dir)

        result = cli_runner(source_dir, dest_dir, "--dry-run", "-r", "--remove-source",
                            config_path=test_config_path)

        assert result.exit_code == 0
        assert "DRY RUN" in result.output
        assert files_under(source_dir) == before
        assert not dest_dir.exists(), "Destination should not be created in dry-run"

    def test_skipped_files_still_exit_zero(self, cli_runner, make_media, source_dir, dest_dir,
                                           test_config_path):
        make_media(source_dir / "nodate.jpg", None)

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 0
        assert (source_dir / "nodate.jpg").exists()

    def test_halt_on_errors_exits_nonzero(self, cli_runner, make_media, source_dir, dest_dir,
                                          test_config_path):
        make_media(source_dir / "nodate.jpg", None)

        result = cli_runner(source_dir, dest_dir, "--halt-on-errors",
                            config_path=test_config_path)

        assert result.exit_code == 1
        assert "error:" in result.output
        assert "caused by:" in result.output
        assert (source_dir / "nodate.jpg").exists()

    def test_source_validation(self, cli_runner, tmp_path, test_config_path):
        result = cli_runner(tmp_path / "does-not-exist", tmp_path / "dest",
                            config_path=test_config_path)

        assert result.exit_code == 1
        assert "Source directory does not exist" in result.output

    def test_trash_source(self, cli_runner, make_media, source_dir, dest_dir, test_config_path,
                          monkeypatch):
        trashed = []
        monkeypatch.setattr("exifmv.file_operations.send2trash", trashed.append)
        make_media(dest_dir / "2023" / "07" / "14" / "a.jpg")
        make_media(source_dir / "a.jpg")

        result = cli_runner(source_dir, dest_dir, "--trash-source", config_path=test_config_path)

        assert result.exit_code == 0
        assert trashed == [str(source_dir / "a.jpg")]

    def test_version(self, cli_runner, test_config_path):
        result = cli_runner("--version", config_path=test_config_path)
        assert result.exit_code == 0
        assert result.output.strip() == __version__


class TestOptionValidation:
    """Test rejection of bad options before any file is touched."""

    @pytest.mark.parametrize("day_wrap", ["25:00", "4", "four:thirty", "4:75"])
    def test_bad_day_wrap(self, cli_runner, make_media, source_dir, dest_dir, test_config_path,
                          day_wrap):
        make_media(source_dir / "a.jpg")

        result = cli_runner(source_dir, dest_dir, "--day-wrap", day_wrap,
                            config_path=test_config_path)

        assert result.exit_code == 1
        assert "Invalid day-wrap" in result.output
        assert (source_dir / "a.jpg").exists()
        assert not dest_dir.exists()

    def test_remove_and_trash_are_exclusive(self, cli_runner, source_dir, dest_dir,
                                            test_config_path):
        result = cli_runner(source_dir, dest_dir, "--remove-source", "--trash-source",
                            config_path=test_config_path)

        assert result.exit_code == 2
        assert "not allowed with" in result.error

    def test_jobs_must_be_positive(self, cli_runner, source_dir, dest_dir, test_config_path):
        result = cli_runner(source_dir, dest_dir, "--jobs", "0", config_path=test_config_path)
        assert result.exit_code == 2


class TestConfiguration:
    """Test defaults read from the YAML config file."""

    def write_config(self, path, text):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)

    def test_config_file_is_never_written(self, cli_runner, make_media, source_dir, dest_dir,
                                          test_config_path):
        make_media(source_dir / "a.jpg")
        cli_runner(source_dir, dest_dir, config_path=test_config_path)
        assert not test_config_path.exists()

    def test_defaults_from_config(self, cli_runner, make_media, source_dir, dest_dir,
                                  test_config_path):
        self.write_config(test_config_path, "recursive: true\nmake_lowercase: true\n")
        make_media(source_dir / "sub" / "IMG_0001.JPG")

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 0
        assert files_under(dest_dir) == ["2023/07/14/img_0001.jpg"]

    def test_day_wrap_from_config(self, cli_runner, make_media, source_dir, dest_dir,
                                  test_config_path):
        # Unquoted 4:30 is a YAML base-60 integer
        self.write_config(test_config_path, "day_wrap: 4:30\n")
        make_media(source_dir / "a.jpg", "2023:07:14 19:30:00")

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 0
        assert files_under(dest_dir) == ["2023/07/15/a.jpg"]

    def test_command_line_overrides_config(self, cli_runner, make_media, source_dir, dest_dir,
                                           test_config_path):
        self.write_config(test_config_path, "day_wrap: '4:30'\n")
        make_media(source_dir / "a.jpg", "2023:07:14 19:30:00")

        result = cli_runner(source_dir, dest_dir, "--day-wrap", "0:00",
                            config_path=test_config_path)

        assert result.exit_code == 0
        assert files_under(dest_dir) == ["2023/07/14/a.jpg"]

    def test_duplicate_policy_from_config(self, cli_runner, make_media, source_dir, dest_dir,
                                          test_config_path):
        self.write_config(test_config_path, "duplicate_policy: remove\n")
        make_media(dest_dir / "2023" / "07" / "14" / "a.jpg")
        make_media(source_dir / "a.jpg")

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 0
        assert not (source_dir / "a.jpg").exists()

    def test_invalid_config_value(self, cli_runner, source_dir, dest_dir, test_config_path):
        self.write_config(test_config_path, "duplicate_policy: shred\n")

        result = cli_runner(source_dir, dest_dir, config_path=test_config_path)

        assert result.exit_code == 1
        assert "duplicate_policy" in result.output

    def test_config_option_selects_file(self, cli_runner, make_media, source_dir, dest_dir,
                                        tmp_path):
        other = tmp_path / "other.yml"
        self.write_config(other, "make_lowercase: true\n")
        make_media(source_dir / "A.JPG")

        result = cli_runner(source_dir, dest_dir, "--config", other)

        assert result.exit_code == 0
        assert files_under(dest_dir) == ["2023/07/14/a.jpg"]
