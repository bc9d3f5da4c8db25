import pytest
import numpy as np
import polars as pl
from polars import col as c
from dataclasses import replace

from data_model import CCOPFSettings, MissingSettingError
from helpers.linear_algebra import NumericalPreconditionError
from pipeline_ccopf import PipelineDataManager
from conftest import settings_dict


class DataManagerTestBase:
    @pytest.fixture(autouse=True)
    def setup_common_data(self, test_three_bus_feeder, test_five_bus_feeder):
        self.three_bus = test_three_bus_feeder
        self.five_bus = test_five_bus_feeder

    def build(self, feeder, **overrides) -> PipelineDataManager:
        n_buses = feeder.node_data.height
        data_manager = PipelineDataManager(
            settings=CCOPFSettings.from_mapping(settings_dict(n_buses, **overrides))
        )
        data_manager.add_grid_data(feeder)
        return data_manager


class TestSettings:
    def test_missing_setting(self):
        settings = settings_dict(3)
        del settings["z_v"]
        with pytest.raises(MissingSettingError) as error:
            CCOPFSettings.from_mapping(settings)
        assert error.value.key == "z_v"
        assert "z_v" in str(error.value)
        assert isinstance(error.value, KeyError)

    def test_loadfac_is_optional(self):
        settings = CCOPFSettings.from_mapping(settings_dict(3))
        assert settings.loadfac is None

    def test_covariance_from_array(self):
        settings = CCOPFSettings.from_mapping(settings_dict(2, Σ=np.eye(2)))
        np.testing.assert_array_equal(settings.covariance, np.eye(2))


class TestGridValidation(DataManagerTestBase):
    def test_two_slack_nodes(self):
        feeder = replace(
            self.three_bus,
            node_data=self.three_bus.node_data.with_columns(
                pl.when(c("node_id") == 1).then(pl.lit("slack")).otherwise(c("type")).alias("type")
            ),
        )
        with pytest.raises(ValueError, match="only one slack node"):
            self.build(feeder)

    def test_slack_node_is_not_the_root(self):
        feeder = replace(
            self.three_bus,
            node_data=self.three_bus.node_data.with_columns(
                type=pl.Series(["pq", "slack", "pq"])
            ),
        )
        with pytest.raises(ValueError, match="root"):
            self.build(feeder)

    def test_disconnected_grid(self):
        feeder = replace(self.three_bus, edge_data=self.three_bus.edge_data.head(1))
        with pytest.raises(ValueError, match="radial"):
            self.build(feeder)

    def test_covariance_shape(self):
        with pytest.raises(ValueError, match="shape"):
            self.build(self.three_bus, Σ=np.zeros((2, 2)))

    def test_covariance_not_psd(self):
        Σ = np.zeros((3, 3))
        Σ[1, 2] = Σ[2, 1] = 1.0
        with pytest.raises(NumericalPreconditionError):
            self.build(self.three_bus, Σ=Σ)


class TestParameters(DataManagerTestBase):
    def test_cone_index_mapping(self):
        data_manager = self.build(self.five_bus)
        metadata = data_manager.metadata
        assert metadata.idx_to_bus == {0: 1, 1: 2, 2: 3, 3: 4}
        assert metadata.bus_to_idx == {1: 0, 2: 1, 3: 2, 4: 3}
        assert data_manager.slack_node == 0

    def test_loadfac_scales_demand(self):
        data_manager = self.build(self.three_bus, loadfac=2.0)
        parameters = data_manager.grid_data_parameters_dict[None]  # type: ignore
        assert parameters["p_cons"][1] == pytest.approx(1.0)
        assert parameters["q_cons"][2] == pytest.approx(0.4)
        # power factor is kept
        assert parameters["q_cons"][1] / parameters["p_cons"][1] == pytest.approx(0.4)

    def test_voltage_band(self):
        parameters = self.build(self.three_bus, vfac=0.05).grid_data_parameters_dict[None]  # type: ignore
        assert parameters["v_max_sq"][2] == pytest.approx(1.05**2)
        assert parameters["v_min_sq"][2] == pytest.approx(0.95**2)

    def test_bus_voltage_bounds(self):
        parameters = self.build(self.three_bus).grid_data_parameters_dict[None]  # type: ignore
        assert parameters["v_max_sq"][1] == pytest.approx(1.21)
        assert parameters["v_min_sq"][1] == pytest.approx(0.81)

    def test_spread_and_schedule_cost(self):
        data_manager = self.build(
            self.five_bus, Σ=np.diag([1.0, 1e-3, 2e-3, 1e-3, 2e-3]), qcfac=4.0
        )
        parameters = data_manager.grid_data_parameters_dict[None]  # type: ignore
        assert data_manager.metadata.s == pytest.approx(np.sqrt(6e-3))
        assert parameters["schedule_scale"][None] == pytest.approx(np.sqrt(6e-3))
        assert parameters["F"][0] == pytest.approx(2.0)
        assert parameters["F"][4] == pytest.approx(np.sqrt(12.0))
        assert parameters["F_schedule"][0] == 0.0
        assert parameters["F_schedule"][2] == pytest.approx(np.sqrt(8.0))
        assert parameters["ancestor"][4] == 3
        assert sorted(parameters["G"][None]) == [0, 2, 4]

    def test_numpy_covariance_in_metadata(self):
        Σ = np.diag([0.0, 1e-3, 2e-3])
        metadata = self.build(self.three_bus, Σ=Σ).metadata
        np.testing.assert_array_equal(metadata.Σ, Σ)
        assert not metadata.any_cc
