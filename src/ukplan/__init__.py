"""ukplan: UK household tax and lifetime cash-flow planner."""

__version__ = "0.1.0"

from ukplan.analytics.drawdown import DrawdownPots as DrawdownPots
from ukplan.analytics.drawdown import generate_drawdown_plan as generate_drawdown_plan
from ukplan.analytics.scenarios import ScenarioSummary as ScenarioSummary
from ukplan.analytics.scenarios import run_scenarios as run_scenarios
from ukplan.config.defaults import couple_household as couple_household
from ukplan.config.defaults import default_household as default_household
from ukplan.config.defaults import early_retiree_household as early_retiree_household
from ukplan.config.schema import Account as Account
from ukplan.config.schema import BonusStructure as BonusStructure
from ukplan.config.schema import CommittedOutgoing as CommittedOutgoing
from ukplan.config.schema import Contribution as Contribution
from ukplan.config.schema import Household as Household
from ukplan.config.schema import Person as Person
from ukplan.config.schema import PersonIncome as PersonIncome
from ukplan.config.views import filter_household_by_person as filter_household_by_person
from ukplan.core.engine import LifetimeCashFlowResult as LifetimeCashFlowResult
from ukplan.core.engine import generate_lifetime_cash_flow as generate_lifetime_cash_flow
from ukplan.taxes.income import income_tax as income_tax
from ukplan.taxes.income import national_insurance as national_insurance
from ukplan.taxes.income import student_loan as student_loan
from ukplan.taxes.income import take_home_pay as take_home_pay
from ukplan.taxes.rules import TaxRuleTable as TaxRuleTable
from ukplan.taxes.rules import load_tax_rules as load_tax_rules
