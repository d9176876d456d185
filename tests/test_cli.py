import json
import zipfile

from photos_zipper import download_photos
from photos_zipper.download_photos import main

ROUTES = {
    '/photos/manifest.json': {'folders': ['trip']},
    '/photos/trip/index.json': {'files': ['a.jpg', 'b.jpg'], 'folders': [{'name': 'day1'}]},
    '/photos/trip/a.jpg': b'A',
    '/photos/trip/b.jpg': b'B',
}


def _patch_fetcher(monkeypatch, fetcher):
    monkeypatch.setattr(download_photos, 'Fetcher', lambda *args, **kwargs: fetcher)


def _config(tmp_path, **site):
    path = tmp_path / 'photos_config.json'
    path.write_text(json.dumps({'site': site}), encoding='utf-8')
    return str(path)


def test_list_prints_root_folders(tmp_path, capsys, monkeypatch, make_fetcher):
    _patch_fetcher(monkeypatch, make_fetcher(ROUTES))
    assert main(['--config', _config(tmp_path), '--output', str(tmp_path / 'out'), '--list']) == 0
    out = capsys.readouterr().out
    assert 'trip' in out and '/photos/trip/' in out


def test_tree_prints_folder_contents(tmp_path, capsys, monkeypatch, make_fetcher):
    _patch_fetcher(monkeypatch, make_fetcher(ROUTES))
    assert main(['--config', _config(tmp_path), '--output', str(tmp_path / 'out'), '--tree', 'trip']) == 0
    out = capsys.readouterr().out
    assert 'day1/' in out and 'a.jpg' in out and 'b.jpg' in out


def test_folder_download_writes_archive(tmp_path, capsys, monkeypatch, make_fetcher):
    _patch_fetcher(monkeypatch, make_fetcher(ROUTES))
    out_dir = tmp_path / 'out'
    assert main(['--config', _config(tmp_path), '--output', str(out_dir), '--folder', 'trip', '-w', '2']) == 0
    with zipfile.ZipFile(out_dir / 'trip.zip') as zf:
        assert zf.namelist() == ['a.jpg', 'b.jpg']
    assert 'Done (built)' in capsys.readouterr().out
    assert (out_dir / 'photos_zipper.log').exists()


def test_sequential_download_writes_loose_files(tmp_path, monkeypatch, make_fetcher):
    _patch_fetcher(monkeypatch, make_fetcher(ROUTES))
    monkeypatch.setattr(download_photos.time, 'sleep', lambda s: None)
    out_dir = tmp_path / 'out'
    assert main(['--config', _config(tmp_path), '--output', str(out_dir), '--folder', 'trip', '--sequential']) == 0
    assert (out_dir / 'trip_a.jpg').read_bytes() == b'A'
    assert (out_dir / 'trip_b.jpg').read_bytes() == b'B'
    assert not (out_dir / 'trip.zip').exists()


def test_user_facing_failure_exit_code(tmp_path, capsys, monkeypatch, make_fetcher):
    _patch_fetcher(monkeypatch, make_fetcher({}))
    assert main(['--config', _config(tmp_path), '--output', str(tmp_path / 'out'), '--all']) == 1
    assert '❌ No files found' in capsys.readouterr().out


def test_no_action_prints_help(tmp_path, capsys):
    assert main(['--config', _config(tmp_path), '--output', str(tmp_path / 'out')]) == 0
    assert 'usage' in capsys.readouterr().out.lower()
