"""
Mitigation recommendations for a simulated calamity.

Output order is fixed:
1. replacement advice for species with survival below 50%
2. the two mitigation lines for the calamity type (plus emergency
   irrigation for severe droughts)
3. escalation lines when severity exceeds 70
"""

from typing import List, Sequence

from .calculator import CalamityScenario, CalamityType, SpeciesImpact

LOW_SURVIVAL_THRESHOLD = 50
SEVERE_DROUGHT_THRESHOLD = 60
ESCALATION_THRESHOLD = 70

MITIGATION_ACTIONS = {
    CalamityType.DROUGHT.value: [
        "Implement drip irrigation systems to conserve water",
        "Apply mulching to reduce soil moisture evaporation",
    ],
    CalamityType.FLOOD.value: [
        "Improve drainage systems around plantation areas",
        "Create water channels to redirect excess water",
    ],
    CalamityType.HEAT_WAVE.value: [
        "Install shade structures for vulnerable seedlings",
        "Increase irrigation frequency during peak heat",
    ],
    CalamityType.FROST.value: [
        "Use frost cloth covering for young plants",
        "Apply anti-transpirant sprays before frost events",
    ],
    CalamityType.PEST_OUTBREAK.value: [
        "Deploy pheromone traps for early detection",
        "Consider biological pest control agents",
    ],
    CalamityType.MINERAL_DEPLETION.value: [
        "Conduct soil testing and apply targeted fertilizers",
        "Implement crop rotation or companion planting",
    ],
}

SEVERE_DROUGHT_ACTION = "Consider emergency irrigation from alternative water sources"

ESCALATION_ACTIONS = [
    "Activate emergency response protocols",
    "Prepare for potential replanting in severely affected areas",
]


def low_survival_species(species_impact: Sequence[SpeciesImpact]) -> List[str]:
    return [impact.name for impact in species_impact if impact.survival_rate < LOW_SURVIVAL_THRESHOLD]


def generate_recommendations(
    scenario: CalamityScenario,
    species_impact: Sequence[SpeciesImpact]
) -> List[str]:
    """Build the ordered recommendation list for a simulation result."""
    recommendations = []

    vulnerable = low_survival_species(species_impact)
    if vulnerable:
        recommendations.append(
            f"Consider replacing {', '.join(vulnerable)} with more resilient alternatives"
        )

    recommendations.extend(MITIGATION_ACTIONS.get(scenario.type, []))
    if scenario.type == CalamityType.DROUGHT.value and scenario.severity > SEVERE_DROUGHT_THRESHOLD:
        recommendations.append(SEVERE_DROUGHT_ACTION)

    if scenario.severity > ESCALATION_THRESHOLD:
        recommendations.extend(ESCALATION_ACTIONS)

    return recommendations
