"""
Integration tests for the scrabrudo command line: precompute a table, play a
tournament with it, and refuse to start with unusable inputs.
"""

import csv
import json
import os

import pytest
from eval.cli import build_parser, main
from precompute.lookup import LookupTable


@pytest.fixture
def dice_table_path(tmp_path):
    path = str(tmp_path / 'dice.pkl')
    rc = main(['--quiet', 'precompute', '--variant', 'dice', '--max-unseen', '5', '--trials', '50',
               '--seed', '1', '--out', path])
    assert rc == 0
    return path


class TestCli:
    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_precompute_writes_table(self, dice_table_path):
        table = LookupTable.load(dice_table_path)
        assert table.variant_name == 'dice'
        assert table.max_unseen == 5
        assert table.trials == 50

    def test_precompute_tiles(self, tmp_path):
        words = tmp_path / 'words.txt'
        words.write_text('cat\ndog\n', encoding='utf-8')
        out = str(tmp_path / 'tiles.pkl')
        rc = main(['--quiet', 'precompute', '--variant', 'tiles', '--dict', str(words), '--max-pattern-size', '2',
                   '--max-unseen', '3', '--trials', '20', '--seed', '2', '--out', out])
        assert rc == 0
        table = LookupTable.load(out, variant_name='tiles', max_pattern_size=2, max_unseen=3)
        assert ('ac', 3) in table

    def test_tournament(self, dice_table_path, tmp_path):
        out_dir = str(tmp_path / 'results')
        rc = main(['--quiet', 'tournament', '--variant', 'dice', '--players', '2', '--start-items', '3',
                   '--agents', 'lookup,random', '--games', '3', '--seed', '4', '--table', dice_table_path,
                   '--out', out_dir, '--no-plot'])
        assert rc == 0
        with open(os.path.join(out_dir, 'matches.csv'), newline='', encoding='utf-8') as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 3
        with open(os.path.join(out_dir, 'summary.json'), encoding='utf-8') as f:
            summary = json.load(f)
        assert sum(a['wins'] for a in summary['aggregates']) == 3

    def test_tournament_with_plot(self, dice_table_path, tmp_path):
        out_dir = str(tmp_path / 'plotted')
        rc = main(['--quiet', 'tournament', '--players', '2', '--start-items', '2', '--games', '2',
                   '--seed', '1', '--table', dice_table_path, '--out', out_dir])
        assert rc == 0
        assert os.path.exists(os.path.join(out_dir, 'win_rates.png'))

    def test_incompatible_table_exits_2(self, dice_table_path, tmp_path):
        rc = main(['--quiet', 'tournament', '--players', '4', '--start-items', '5', '--games', '1',
                   '--table', dice_table_path, '--out', str(tmp_path / 'r')])
        assert rc == 2

    def test_empty_dictionary_exits_2(self, tmp_path):
        words = tmp_path / 'empty.txt'
        words.write_text('\n', encoding='utf-8')
        rc = main(['--quiet', 'precompute', '--variant', 'tiles', '--dict', str(words),
                   '--out', str(tmp_path / 't.pkl')])
        assert rc == 2

    def test_missing_table_exits_2(self, tmp_path):
        rc = main(['--quiet', 'play', '--players', '2', '--table', str(tmp_path / 'nope.pkl')])
        assert rc == 2

    def test_bad_policy_file_exits_2(self, dice_table_path, tmp_path):
        policy = tmp_path / 'policy.json'
        policy.write_text(json.dumps({'raise_threshold': 3}), encoding='utf-8')
        rc = main(['--quiet', 'tournament', '--players', '2', '--start-items', '3', '--games', '1',
                   '--table', dice_table_path, '--config', str(policy), '--out', str(tmp_path / 'r')])
        assert rc == 2

    @pytest.mark.parametrize('agents', [',', ''])
    def test_empty_agent_list_exits_2(self, tmp_path, agents):
        rc = main(['--quiet', 'tournament', '--players', '2', '--agents', agents, '--games', '1',
                   '--out', str(tmp_path / 'r')])
        assert rc == 2
