"""Unit tests for the Bayesian hierarchical logistic model."""

import pytest
import numpy as np

from multilevel_ab.core import bayesian
from multilevel_ab.data import views
from multilevel_ab.simulation import generator
from multilevel_ab.simulation.config import SimulationConfig


@pytest.fixture(scope="module")
def model_input():
    """Small population to keep sampling fast."""
    df = generator.simulate_population(SimulationConfig(n_users=30, random_seed=1))
    return views.to_model_input(df)


class TestLazyImport:
    """Tests for loading the module through the core package."""

    def test_package_attribute(self):
        """Test core.bayesian resolves to the submodule."""
        import importlib
        import multilevel_ab.core as core

        assert core.bayesian is importlib.import_module('multilevel_ab.core.bayesian')
        assert core.bayesian.PARAMETERS == ['beta0', 'beta1', 'sigma_user']

    def test_from_import(self):
        """Test ``from multilevel_ab.core import bayesian`` works."""
        from multilevel_ab.core import bayesian as loaded

        assert loaded.hierarchical_logit_posterior is bayesian.hierarchical_logit_posterior

    def test_unknown_attribute(self):
        """Test other names still raise AttributeError."""
        import multilevel_ab.core as core

        with pytest.raises(AttributeError, match="has no attribute 'nonexistent'"):
            core.nonexistent


class TestBuildModel:
    """Tests for the model structure."""

    def test_free_variables(self, model_input):
        """Test priors and non-centred user offsets."""
        model = bayesian.build_model(model_input)
        names = {rv.name for rv in model.free_RVs}

        assert {'beta0', 'beta1', 'sigma_user', 'z_user'} <= names
        assert [rv.name for rv in model.observed_RVs] == ['edit_success']
        assert len(model.coords['user']) == model_input.n_groups


@pytest.mark.slow
class TestHierarchicalLogitPosterior:
    """Tests for posterior sampling."""

    @pytest.fixture(scope="class")
    def posterior(self, model_input):
        return bayesian.hierarchical_logit_posterior(
            model_input, draws=300, tune=300, chains=2, random_seed=42
        )

    def test_result_keys(self, posterior):
        """Test summary quantities are reported."""
        for key in ('idata', 'summary', 'beta0_mean', 'beta1_mean', 'sigma_user_mean',
                    'beta1_ci', 'prob_beta1_positive', 'divergences', 'max_r_hat'):
            assert key in posterior

        assert list(posterior['summary'].index) == bayesian.PARAMETERS

    def test_posterior_shape(self, posterior, model_input):
        """Test draws per chain and one offset per user."""
        post = posterior['idata'].posterior

        assert post['beta1'].shape == (2, 300)
        assert post['z_user'].shape == (2, 300, model_input.n_groups)

    def test_plausible_estimates(self, posterior):
        """Test posterior of beta1 is in a plausible range of the true 0.8."""
        lower, upper = posterior['beta1_ci']

        assert lower < posterior['beta1_mean'] < upper
        assert -0.5 < posterior['beta1_mean'] < 2.5
        assert posterior['sigma_user_mean'] > 0
        assert 0 <= posterior['prob_beta1_positive'] <= 1
        assert posterior['divergences'] >= 0

    def test_comparison_keys(self, posterior):
        """Test keys shared with the other methods for recovery tables."""
        assert posterior['beta1'] == posterior['beta1_mean']
        assert posterior['ci_beta1'] == posterior['beta1_ci']


class TestInvalidInputs:
    """Tests for argument validation (no sampling)."""

    def test_invalid_inputs(self, model_input):
        with pytest.raises(ValueError, match="draws and chains must be positive"):
            bayesian.hierarchical_logit_posterior(model_input, draws=0)

        with pytest.raises(ValueError, match="Prior parameters must be positive"):
            bayesian.hierarchical_logit_posterior(model_input, prior_sigma_scale=-1)

        with pytest.raises(ValueError, match="hdi_prob must be in"):
            bayesian.hierarchical_logit_posterior(model_input, hdi_prob=1.0)
