import itertools

from simulation import (
    CalamityScenario,
    SPECIES_TABLE,
    SpeciesProfile,
    calculate_metrics_impact,
    calculate_mortality_rate,
    calculate_species_impact,
    lookup_or_default,
    round_half_away,
    round_to,
    select_base_sensitivity,
)

CALAMITY_TYPES = ["drought", "flood", "heat_wave", "frost", "pest_outbreak", "mineral_depletion"]


def test_round_half_away_from_zero():
    assert round_half_away(13.5) == 14
    assert round_half_away(12.5) == 13
    assert round_half_away(-2.5) == -3
    assert round_half_away(0.49) == 0
    assert round_half_away(-0.4) == 0
    assert round_to(1.25, 1) == 1.3
    assert round_to(0.1234, 3) == 0.123


def test_neem_drought_golden_values(drought_scenario):
    neem = lookup_or_default("Neem")

    assert select_base_sensitivity("drought", neem) == 0.1
    assert abs(calculate_mortality_rate(drought_scenario, neem) - 0.06) < 1e-9

    impact = calculate_species_impact(drought_scenario, neem)
    assert impact.survival_rate == 94
    assert impact.growth_impact == 7
    assert impact.recovery_time == 14


def test_sensitivity_selected_by_type():
    teak = SPECIES_TABLE["Teak"]
    assert select_base_sensitivity("flood", teak) == teak.flood_sensitivity
    assert select_base_sensitivity("heat_wave", teak) == teak.heat_sensitivity
    assert select_base_sensitivity("frost", teak) == teak.frost_sensitivity
    assert select_base_sensitivity("pest_outbreak", teak) == teak.pest_sensitivity
    assert select_base_sensitivity("mineral_depletion", teak) == teak.mineral_dependency
    assert select_base_sensitivity("volcano", teak) == 0.4


def test_survival_floor_when_mortality_exceeds_one():
    scenario = CalamityScenario(type="frost", severity=100, affected_area=100, duration=12)
    impact = calculate_species_impact(scenario, SPECIES_TABLE["Bamboo"])

    assert calculate_mortality_rate(scenario, SPECIES_TABLE["Bamboo"]) > 1
    assert impact.survival_rate == 5
    assert impact.growth_impact == 95
    assert impact.recovery_time == 27


def test_zero_duration_means_no_recovery_time():
    scenario = CalamityScenario(type="heat_wave", severity=50, affected_area=50, duration=0)
    impact = calculate_species_impact(scenario, SPECIES_TABLE["Mango"])
    assert impact.recovery_time == 0
    # 0.3 * 0.5 * 0.5 * 1.0 = 0.075
    assert impact.survival_rate == 93
    assert impact.growth_impact == 9


def test_duration_factor_saturates_at_twelve_months():
    year = CalamityScenario(type="drought", severity=50, affected_area=50, duration=12)
    two_years = CalamityScenario(type="drought", severity=50, affected_area=50, duration=24)
    teak = SPECIES_TABLE["Teak"]
    assert calculate_mortality_rate(year, teak) == calculate_mortality_rate(two_years, teak)


def test_bounds_hold_across_nominal_ranges():
    levels = [0, 25, 50, 75, 100]
    durations = [0, 3, 6, 12, 24]
    for profile in SPECIES_TABLE.values():
        for calamity, severity, area, duration in itertools.product(CALAMITY_TYPES, levels, levels, durations):
            scenario = CalamityScenario(calamity, severity, area, duration)
            impact = calculate_species_impact(scenario, profile)
            assert 5 <= impact.survival_rate <= 100
            assert 0 <= impact.growth_impact <= 95
            assert impact.recovery_time >= 0


def test_unknown_species_matches_explicit_default_profile(drought_scenario):
    explicit = SpeciesProfile("Mystery Oak", 0.4, 0.4, 0.3, 0.5, 0.3, 0.4, 0.6)
    assert calculate_species_impact(drought_scenario, lookup_or_default("Mystery Oak")) == \
        calculate_species_impact(drought_scenario, explicit)


def test_species_card_presentation_fields(drought_scenario):
    card = calculate_species_impact(drought_scenario, SPECIES_TABLE["Neem"]).to_dict()["species"]
    assert card == {
        "name": "Neem",
        "type": "Native",
        "suitability": 75,
        "waterRequirement": "Medium",
        "carbonCapture": 35,
        "description": "",
        "droughtTolerance": 90,
        "mineralSensitivity": 20,
    }


def test_metrics_for_drought(drought_scenario):
    impacts = [calculate_species_impact(drought_scenario, SPECIES_TABLE["Neem"])]
    metrics = calculate_metrics_impact(drought_scenario, impacts)
    assert metrics.to_dict() == {"ndvi": -19, "moisture": -40, "soilHealth": -16, "carbonCapture": -5}


def test_metrics_moisture_and_soil_by_type():
    flood = CalamityScenario("flood", severity=50, affected_area=100, duration=1)
    mineral = CalamityScenario("mineral_depletion", severity=50, affected_area=100, duration=1)
    frost = CalamityScenario("frost", severity=50, affected_area=100, duration=1)

    assert calculate_metrics_impact(flood, []).moisture == 15
    assert calculate_metrics_impact(mineral, []).soil_health == -30
    assert calculate_metrics_impact(mineral, []).moisture == -10
    assert calculate_metrics_impact(frost, []).soil_health == -10


def test_metrics_with_no_species():
    scenario = CalamityScenario("drought", severity=50, affected_area=50, duration=3)
    metrics = calculate_metrics_impact(scenario, [])
    assert metrics.carbon_capture == -80
    assert metrics.ndvi == -10
