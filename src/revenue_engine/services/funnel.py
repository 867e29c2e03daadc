from __future__ import annotations

from ..models.results import FunnelResult
from .rates import EffectiveRates, finite_or_zero


def compute_funnel(
    leads: float,
    mql_rate: float,
    sql_rate: float,
    opp_rate: float,
    opp_to_proposal: float,
    proposal_to_win: float,
    asp: float,
) -> FunnelResult:
    """Chain the monthly conversion rates (in percent) from leads down to wins.

    Rates are expected to come out of the scenario normalizer, so they are already
    finite and non-negative. ``asp`` is the annual contract value of a won deal, which
    makes ``wins * asp`` the ARR booked per month.
    """
    mqls = leads * mql_rate / 100
    sqls = mqls * sql_rate / 100
    opportunities = sqls * opp_rate / 100
    proposals = opportunities * opp_to_proposal / 100
    wins = proposals * proposal_to_win / 100
    monthly_new_arr = wins * asp
    return FunnelResult(
        mqls=mqls,
        sqls=sqls,
        opportunities=opportunities,
        proposals=proposals,
        wins=wins,
        monthly_new_arr=monthly_new_arr,
        new_arr_annual=monthly_new_arr * 12,
    )


def funnel_from_rates(leads: float, rates: EffectiveRates) -> FunnelResult:
    return compute_funnel(
        finite_or_zero(leads),
        rates.mql_rate,
        rates.sql_rate,
        rates.opp_rate,
        rates.opp_to_proposal,
        rates.proposal_to_win,
        rates.asp,
    )
