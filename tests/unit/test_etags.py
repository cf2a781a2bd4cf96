"""
Unit tests for etags tag generation.
"""
import logging
import os
import subprocess
import sys
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

from codeindex.config import load_config
from codeindex.etags import (
    DEF_REGEX,
    NS_REGEX,
    generate_etags,
    iter_source_files,
    should_index,
    walk_post_order,
)


def fake_etags(cmd, cwd=None, **kwargs):
    """Stand-in for 'etags -a': appends one line per file to ./TAGS."""
    assert '-a' in cmd
    with open(Path(cwd) / 'TAGS', 'a') as f:
        f.write(f"\x0c\n{cmd[-1]},0\n")
    return subprocess.CompletedProcess(cmd, 0, stdout='', stderr='')


class TestShouldIndex:
    """Test the per-file filter."""

    def test_source_extensions(self):
        """Should accept clj, cljs, cljc and edn files."""
        for name in ('a.clj', 'a.cljs', 'a.cljc', 'deps.edn'):
            assert should_index(Path('src') / name)

    def test_other_extensions(self):
        """Should reject anything else."""
        for name in ('a.java', 'a.md', 'TAGS', 'a.clj.bak', 'clj'):
            assert not should_index(Path('src') / name)

    def test_meta_inf_excluded(self):
        """Should skip anything below a META-INF directory."""
        assert not should_index(Path('.lein-codeindex/META-INF/maven/org/lib/config.edn'))
        assert not should_index(Path('META-INF/data_readers.clj'))

    def test_build_descriptor_excluded(self):
        """Should skip project.clj anywhere in the tree."""
        assert not should_index(Path('project.clj'))
        assert not should_index(Path('.lein-codeindex/some/lib/project.clj'))

    def test_similar_names_kept(self):
        """Only the exact build descriptor name is excluded."""
        assert should_index(Path('src/app/subproject.clj'))
        assert should_index(Path('src/META-INFO/core.clj'))


class TestWalk:
    """Test tree traversal."""

    def test_post_order(self, tmp_path):
        """Children should be visited before their directory."""
        (tmp_path / 'a' / 'b').mkdir(parents=True)
        (tmp_path / 'a' / 'b' / 'x.clj').write_text('')
        (tmp_path / 'a' / 'y.clj').write_text('')
        (tmp_path / 'z.clj').write_text('')

        visited = [p.relative_to(tmp_path).as_posix() for p in walk_post_order(tmp_path)]

        assert visited == ['a/b/x.clj', 'a/b', 'a/y.clj', 'a', 'z.clj', '.']

    def test_directories_never_matched(self, tmp_path):
        """A directory named like a source file should only be recursed into."""
        (tmp_path / 'weird.clj').mkdir()
        (tmp_path / 'weird.clj' / 'inner.clj').write_text('')

        files = [p.as_posix() for p in iter_source_files(tmp_path)]

        assert files == ['weird.clj/inner.clj']

    def test_iter_source_files(self, project):
        """Should yield only indexable files, relative to the root."""
        meta = project / '.lein-codeindex' / 'META-INF' / 'leiningen' / 'lib'
        meta.mkdir(parents=True)
        (meta / 'project.clj').write_text('(defproject lib "1.0")\n')
        (meta / 'readers.clj').write_text('{}\n')
        (project / '.lein-codeindex' / 'lib').mkdir()
        (project / '.lein-codeindex' / 'lib' / 'core.clj').write_text('(ns lib.core)\n')

        files = sorted(p.as_posix() for p in iter_source_files(project))

        assert files == [
            '.lein-codeindex/lib/core.clj',
            'resources/config.edn',
            'src/app/core.clj',
            'src/app/ui.cljs',
            'test/app/core_test.clj',
        ]


class TestGenerateEtags:
    """Test the etags run."""

    def test_invokes_etags_per_file(self, config):
        """Should call etags -a with both regexes once per source file."""
        with patch('codeindex.etags.subprocess.run', side_effect=fake_etags) as mock_run:
            count = generate_etags(config)

        assert count == 4
        assert mock_run.call_count == 4
        for call in mock_run.call_args_list:
            cmd = call[0][0]
            assert cmd[:4] == ['etags', '-a', DEF_REGEX, NS_REGEX]
            assert call[1]['cwd'] == config.project_root
        indexed = {call[0][0][-1] for call in mock_run.call_args_list}
        assert 'project.clj' not in indexed
        assert 'README.md' not in indexed

    def test_regex_literals(self):
        """Regexes should reach etags exactly as written on a shell line."""
        assert DEF_REGEX == '--regex=/[ \\t\\(]*def[a-z]* \\([a-z-!?]+\\)/\\1/'
        assert NS_REGEX == '--regex=/[ \\t\\(]*ns \\([a-z0-9.\\-]+\\)/\\1/'

    def test_old_tags_removed(self, config):
        """Stale TAGS content should not survive regeneration."""
        config.etags_file.write_text('stale\n')

        with patch('codeindex.etags.subprocess.run', side_effect=fake_etags):
            generate_etags(config)

        assert 'stale' not in config.etags_file.read_text()

    def test_repeated_runs_identical(self, config):
        """Two runs over an unchanged tree should produce identical TAGS."""
        with patch('codeindex.etags.subprocess.run', side_effect=fake_etags):
            generate_etags(config)
            first = config.etags_file.read_bytes()
            generate_etags(config)
            second = config.etags_file.read_bytes()

        assert first == second

    def test_no_matching_files(self, tmp_path):
        """With nothing to index the old TAGS should be gone and not recreated."""
        config = load_config(tmp_path, environ={})
        config.etags_file.write_text('old\n')
        (tmp_path / 'notes.txt').write_text('')

        with patch('codeindex.etags.subprocess.run') as mock_run:
            assert generate_etags(config) == 0

        mock_run.assert_not_called()
        assert not config.etags_file.exists()

    def test_stderr_logged_and_continues(self, config, caplog):
        """A file etags complains about should not stop the run."""
        def noisy_etags(cmd, cwd=None, **kwargs):
            if cmd[-1].endswith('ui.cljs'):
                return subprocess.CompletedProcess(cmd, 0, stdout='', stderr='etags: cannot open')
            return fake_etags(cmd, cwd=cwd)

        with caplog.at_level(logging.WARNING):
            with patch('codeindex.etags.subprocess.run', side_effect=noisy_etags) as mock_run:
                generate_etags(config)

        assert mock_run.call_count == 4
        assert 'cannot open' in caplog.text
        assert 'ui.cljs' in caplog.text

    def test_missing_etags_binary(self, config, caplog):
        """A missing etags binary should be logged per file, not raised."""
        with caplog.at_level(logging.WARNING):
            with patch('codeindex.etags.subprocess.run', side_effect=FileNotFoundError('etags')):
                assert generate_etags(config) == 4

        assert 'Failed to index' in caplog.text

    def test_undecodable_stderr_continues(self, config, caplog):
        """Non-UTF-8 bytes on etags stderr should be logged, not raised."""
        script = "import sys; sys.stderr.buffer.write(b'etags: \\xff\\n')"
        config = replace(config, etags_command=(sys.executable, '-c', script))

        with caplog.at_level(logging.WARNING):
            assert generate_etags(config) == 4

        assert caplog.text.count('etags reported for') == 4
        assert '�' in caplog.text

    def test_unreadable_directory_skipped(self, config, caplog):
        """A directory that cannot be listed should be skipped, not abort the run."""
        real_scandir = os.scandir
        blocked = config.project_root / 'test'

        def scandir(path):
            if Path(path) == blocked:
                raise PermissionError(13, 'Permission denied', str(path))
            return real_scandir(path)

        with caplog.at_level(logging.WARNING):
            with patch('codeindex.etags.os.scandir', side_effect=scandir):
                with patch('codeindex.etags.subprocess.run', side_effect=fake_etags) as mock_run:
                    count = generate_etags(config)

        assert count == 3
        indexed = {call[0][0][-1] for call in mock_run.call_args_list}
        assert not any(p.startswith('test') for p in indexed)
        assert 'resources/config.edn' in indexed
        assert f"Skipping {blocked}" in caplog.text

    def test_old_tags_not_removable(self, config, caplog):
        """A TAGS path that cannot be unlinked should be logged, not raised."""
        config.etags_file.mkdir()

        with caplog.at_level(logging.WARNING):
            with patch('codeindex.etags.subprocess.run') as mock_run:
                mock_run.return_value = subprocess.CompletedProcess([], 0, stdout='', stderr='')
                assert generate_etags(config) == 4

        assert 'Unable to remove old' in caplog.text
