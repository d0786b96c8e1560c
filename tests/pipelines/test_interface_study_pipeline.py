"""Integration tests for the edit-interface study pipeline."""

import pytest
import pandas as pd

from multilevel_ab.pipelines import run_interface_study
from multilevel_ab.simulation.config import SimulationConfig


@pytest.fixture(scope="module")
def results():
    """Study without the Bayesian model."""
    return run_interface_study(run_bayesian=False, verbose=False)


class TestInterfaceStudy:
    """Tests for the end-to-end study run."""

    def test_result_keys(self, results):
        """Test every step stores its result."""
        for key in ('config', 'data', 'data_summary', 'most_active', 'pooled', 'pooled_delta',
                    'pooled_excluding_active', 'multilevel', 'bayesian', 'paired_table',
                    'paired_test', 'recovery'):
            assert key in results

        assert results['bayesian'] is None
        assert results['multilevel'] is not None

    def test_default_config(self, results):
        """Test default run uses 100 users and seed 42."""
        assert results['config'] == SimulationConfig()
        assert results['data']['user_id'].nunique() == 100

    def test_exclusion_refit(self, results):
        """Test the sensitivity refit drops the top 10 users' attempts."""
        top = results['most_active']

        assert top['n_users'] == 10
        assert results['pooled_excluding_active']['n_obs'] == len(results['data']) - top['total_edits']

    def test_paired_test(self, results):
        """Test the paired test uses every row of the paired table."""
        assert results['paired_test']['n_pairs'] == len(results['paired_table'])

    def test_recovery_methods(self, results):
        """Test recovery table lists the fitted methods."""
        table = results['recovery']

        assert isinstance(table, pd.DataFrame)
        assert list(table['method']) == ['pooled', 'pooled_excluding_active', 'random_intercept']
        assert table['beta1_hat'].between(-0.5, 2.0).all()

    def test_reproducible(self, results):
        """Test the same config gives the same estimates."""
        again = run_interface_study(run_multilevel=False, run_bayesian=False, verbose=False)

        pd.testing.assert_frame_equal(results['data'], again['data'])
        assert again['pooled']['beta1'] == results['pooled']['beta1']
        assert again['multilevel'] is None

    def test_verbose_output(self, capsys):
        """Test progress is printed for each step."""
        run_interface_study(
            config=SimulationConfig(n_users=30, random_seed=5),
            run_multilevel=False,
            run_bayesian=False,
            verbose=True,
        )
        out = capsys.readouterr().out

        assert "EDIT-INTERFACE MULTILEVEL SIMULATION STUDY" in out
        assert "[1/8]" in out and "[8/8]" in out
        assert "Bayesian hierarchical model skipped" in out
        assert "Study complete" in out

    def test_single_interface_population(self):
        """Test a population that never uses the new interface fails fast."""
        # Every user is active and never picks the new interface
        config = SimulationConfig(
            n_users=3,
            active_threshold=0,
            active_override_probs=(0.0, 0.0),
            random_seed=1,
        )
        with pytest.raises(ValueError, match="must contain both 0 and 1"):
            run_interface_study(config=config, run_bayesian=False, verbose=False)

    def test_top_k_covers_every_user(self, capsys):
        """Test the sensitivity refit is skipped when no users remain."""
        results = run_interface_study(
            config=SimulationConfig(n_users=5),
            top_k=10,
            run_multilevel=False,
            run_bayesian=False,
            verbose=True,
        )
        out = capsys.readouterr().out

        assert results['most_active']['n_users'] == 5
        assert results['pooled_excluding_active'] is None
        assert list(results['recovery']['method']) == ['pooled']
        assert "refit skipped" in out
        assert "Study complete" in out


@pytest.mark.slow
class TestInterfaceStudyBayesian:
    """Tests for the study with the Bayesian step enabled."""

    def test_bayesian_step(self):
        """Test the default Bayesian step runs and joins the recovery table."""
        results = run_interface_study(
            config=SimulationConfig(n_users=20),
            run_multilevel=False,
            bayes_kwargs={'draws': 50, 'tune': 50, 'chains': 1},
            verbose=False,
        )

        assert results['bayesian'] is not None
        assert 'beta1_mean' in results['bayesian']
        assert 'bayesian' in list(results['recovery']['method'])
