"""Unit tests for frequentist estimates of the interface effect."""

import pytest
import numpy as np
from scipy.special import expit, logit

from multilevel_ab.core import frequentist
from multilevel_ab.data import views
from multilevel_ab.simulation import generator
from multilevel_ab.simulation.config import SimulationConfig


def make_input(n_old, x_old, n_new, x_new):
    """Two-group model input with known success counts."""
    response = np.concatenate([
        np.repeat([1, 0], [x_old, n_old - x_old]),
        np.repeat([1, 0], [x_new, n_new - x_new]),
    ])
    predictor = np.repeat([0, 1], [n_old, n_new])
    group_id = [f"{i % 10:03d}" for i in range(n_old + n_new)]
    return views.ModelInput(response=response, fixed_predictor=predictor, group_id=group_id)


class TestPooledLogisticRegression:
    """Tests for the pooled logit."""

    def test_closed_form_two_groups(self):
        """Test MLE matches the log-odds of each group's success rate."""
        result = frequentist.pooled_logistic_regression(make_input(100, 30, 100, 50))

        assert result['beta0'] == pytest.approx(logit(0.3), abs=1e-5)
        assert result['beta1'] == pytest.approx(logit(0.5) - logit(0.3), abs=1e-5)
        assert result['odds_ratio'] == pytest.approx(np.exp(result['beta1']))
        assert result['converged']
        assert result['n_obs'] == 200

    def test_standard_errors(self):
        """Test Wald SEs match 1 / (n p (1 - p)) sums."""
        result = frequentist.pooled_logistic_regression(make_input(100, 30, 100, 50))

        var_old = 1 / (100 * 0.3 * 0.7)
        var_new = 1 / (100 * 0.5 * 0.5)
        assert result['se_beta0'] == pytest.approx(np.sqrt(var_old), rel=1e-4)
        assert result['se_beta1'] == pytest.approx(np.sqrt(var_old + var_new), rel=1e-4)
        assert result['cov_params'].shape == (2, 2)

    def test_confidence_interval(self):
        """Test CI brackets the estimate and odds-ratio CI is its exponential."""
        result = frequentist.pooled_logistic_regression(make_input(100, 30, 100, 50))
        lower, upper = result['ci_beta1']

        assert lower < result['beta1'] < upper
        assert result['ci_odds_ratio'][0] == pytest.approx(np.exp(lower))
        assert result['ci_odds_ratio'][1] == pytest.approx(np.exp(upper))
        assert result['p_value_beta1'] < 0.05

    def test_simulated_population(self):
        """Test pooled estimate on the default population is positive."""
        df = generator.simulate_population(SimulationConfig())
        result = frequentist.pooled_logistic_regression(views.to_model_input(df))

        assert 0.0 < result['beta1'] < 1.6
        assert -1.5 < result['beta0'] < 0.0

    def test_invalid_inputs(self):
        """Test error handling for invalid inputs."""
        single = views.ModelInput(response=[0, 1, 1], fixed_predictor=[0, 0, 0], group_id=['a'] * 3)
        with pytest.raises(ValueError, match="must contain both 0 and 1"):
            frequentist.pooled_logistic_regression(single)

        with pytest.raises(ValueError, match="alpha must be in"):
            frequentist.pooled_logistic_regression(make_input(10, 3, 10, 5), alpha=1.5)


class TestDeltaMethodDifference:
    """Tests for the delta-method interval."""

    def test_point_estimate(self):
        """Test probability difference from the coefficients."""
        result = frequentist.delta_method_difference(-0.7, 0.8, np.zeros((2, 2)))

        assert result['p_old'] == pytest.approx(expit(-0.7))
        assert result['p_new'] == pytest.approx(expit(0.1))
        assert result['difference'] == pytest.approx(expit(0.1) - expit(-0.7))
        assert result['se'] == 0.0
        assert result['ci_lower'] == result['ci_upper'] == pytest.approx(result['difference'])
        assert result['relative_lift'] == pytest.approx(result['difference'] / expit(-0.7))

    def test_standard_error_matches_numeric_gradient(self):
        """Test delta-method SE against a finite-difference gradient."""
        beta0, beta1 = -0.5, 0.6
        cov = np.array([[0.010, -0.004], [-0.004, 0.020]])
        result = frequentist.delta_method_difference(beta0, beta1, cov)

        def g(b0, b1):
            return expit(b0 + b1) - expit(b0)

        h = 1e-6
        grad = np.array([
            (g(beta0 + h, beta1) - g(beta0 - h, beta1)) / (2 * h),
            (g(beta0, beta1 + h) - g(beta0, beta1 - h)) / (2 * h),
        ])
        assert result['se'] == pytest.approx(np.sqrt(grad @ cov @ grad), rel=1e-5)
        assert result['ci_lower'] == pytest.approx(result['difference'] - 1.959964 * result['se'], rel=1e-5)

    def test_from_pooled_fit(self):
        """Test interval around the observed difference in rates."""
        pooled = frequentist.pooled_logistic_regression(make_input(100, 30, 100, 50))
        result = frequentist.delta_method_difference(pooled['beta0'], pooled['beta1'], pooled['cov_params'])

        assert result['difference'] == pytest.approx(0.2, abs=1e-5)
        # Delta method reproduces the unpooled SE for two groups
        expected_se = np.sqrt(0.3 * 0.7 / 100 + 0.5 * 0.5 / 100)
        assert result['se'] == pytest.approx(expected_se, rel=1e-3)

    def test_invalid_covariance(self):
        """Test error handling for invalid covariance matrices."""
        with pytest.raises(ValueError, match="2x2"):
            frequentist.delta_method_difference(0.0, 0.5, np.eye(3))

        with pytest.raises(ValueError, match="symmetric"):
            frequentist.delta_method_difference(0.0, 0.5, np.array([[1.0, 0.5], [0.0, 1.0]]))

        with pytest.raises(ValueError, match="positive semidefinite"):
            frequentist.delta_method_difference(0.0, 0.5, np.array([[1.0, 0.0], [0.0, -1.0]]))


class TestPairedProportionTest:
    """Tests for the paired test on per-user proportions."""

    def test_known_values(self):
        """Test t statistic for a hand-computed example."""
        prop_new = np.array([0.5, 0.6, 0.7, 0.8])
        prop_old = np.array([0.4, 0.5, 0.5, 0.6])
        result = frequentist.paired_proportion_test(prop_new, prop_old)

        # differences 0.1, 0.1, 0.2, 0.2 -> mean 0.15, sd sqrt(0.01 / 3)
        assert result['n_pairs'] == 4
        assert result['mean_difference'] == pytest.approx(0.15)
        assert result['statistic'] == pytest.approx(0.15 / (np.sqrt(0.01 / 3) / 2), rel=1e-6)
        assert result['significant']
        assert result['ci_lower'] < 0.15 < result['ci_upper']
        assert result['method'] == 't-test'

    def test_no_difference(self):
        """Test symmetric differences give a non-significant result."""
        prop_new = np.array([0.5, 0.4, 0.6, 0.5])
        prop_old = np.array([0.4, 0.5, 0.5, 0.6])
        result = frequentist.paired_proportion_test(prop_new, prop_old)

        assert result['mean_difference'] == pytest.approx(0.0)
        assert not result['significant']

    def test_wilcoxon(self):
        """Test signed-rank alternative."""
        rng = np.random.default_rng(0)
        prop_old = rng.uniform(0.2, 0.6, 30)
        prop_new = prop_old + rng.uniform(0.05, 0.2, 30)
        result = frequentist.paired_proportion_test(prop_new, prop_old, method='wilcoxon')

        assert result['method'] == 'wilcoxon'
        assert result['p_value'] < 0.001

    def test_from_paired_table(self):
        """Test paired table columns feed the test directly."""
        df = generator.simulate_population(SimulationConfig())
        table = views.paired_interface_table(df)
        result = frequentist.paired_proportion_test(table['prop_new'], table['prop_old'])

        assert result['n_pairs'] == len(table)
        assert 0 <= result['p_value'] <= 1

    def test_invalid_inputs(self):
        """Test error handling for invalid inputs, including an empty paired table."""
        with pytest.raises(ValueError, match="same length"):
            frequentist.paired_proportion_test([0.1, 0.2], [0.1])

        with pytest.raises(ValueError, match="at least 2 paired observations"):
            frequentist.paired_proportion_test([], [])

        with pytest.raises(ValueError, match="method must be"):
            frequentist.paired_proportion_test([0.1, 0.2], [0.1, 0.3], method='sign')
