"""Planning and review wizards."""

from tandem.modules.planning import PlanningWizard
from tandem.modules.review import ReviewWizard

__all__ = ["PlanningWizard", "ReviewWizard"]
