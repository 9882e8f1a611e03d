"""Tests for bytetracker.cli."""

import pytest
import yaml

from bytetracker.cli import build_config, main, parse_args, run
from bytetracker.tracking import Detection, TrackerConfig


@pytest.fixture
def det_file(tmp_path):
    rows = []
    for frame in range(1, 6):
        rows.append(f"{frame},-1,{100 + frame},50,40,80,0.95,-1,-1,-1")
        rows.append(f"{frame},-1,400,50,40,80,0.2,-1,-1,-1")
    path = tmp_path / 'det.txt'
    path.write_text("\n".join(rows) + "\n")
    return str(path)


class TestBuildConfig:
    """Tests for merging YAML and command line settings."""

    def test_defaults(self):
        args = parse_args(['--detections', 'det.txt', '--output', 'out.txt'])
        assert build_config(args) == TrackerConfig()

    def test_overrides_win(self, tmp_path):
        path = tmp_path / 'tracker.yaml'
        path.write_text(yaml.dump({'tracker': {'max_retention_time': 12, 'match_thresh': 0.7}}))

        args = parse_args([
            '--detections', 'det.txt', '--output', 'out.txt',
            '--config', str(path), '--match-thresh', '0.9', '--mot20',
        ])
        config = build_config(args)

        assert config.max_retention_time == 12
        assert config.match_thresh == 0.9
        assert config.mot20 is True


def test_run_covers_missing_frames():
    det = Detection.from_tlbr(0, 0, 10, 20, 0.9)
    results = run({1: [det], 4: [det]}, TrackerConfig(), progress=False)

    assert [frame for frame, _ in results] == [1, 2, 3, 4]
    assert all(tracks == [] for _, tracks in results)


def test_run_snapshots_each_frame():
    """Test records keep the box reported in their own frame."""
    detections = {
        frame: [Detection.from_tlbr(10 * frame, 0, 10 * frame + 40, 80, 0.9)]
        for frame in range(1, 6)
    }
    results = run(detections, TrackerConfig(), progress=False)

    lefts = [records[0].rect.left for _, records in results[1:]]
    assert len(lefts) == 4
    assert all(a < b for a, b in zip(lefts, lefts[1:]))
    assert {records[0].track_id for _, records in results[1:]} == {1}


def test_main(det_file, tmp_path, capsys):
    output = tmp_path / 'results' / 'seq.txt'

    code = main([
        '--detections', det_file,
        '--output', str(output),
        '--log-dir', str(tmp_path / 'logs'),
    ])

    assert code == 0
    lines = output.read_text().splitlines()
    assert len(lines) == 4
    assert {line.split(',')[1] for line in lines} == {'1'}
    assert [line.split(',')[0] for line in lines] == ['2', '3', '4', '5']
    assert 'TRACKING RESULTS' in capsys.readouterr().out
