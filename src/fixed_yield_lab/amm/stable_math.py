"""Two-asset StableSwap math on integer fixed-point balances.

All functions are pure.  ``amp`` is the amplification coefficient multiplied by
:data:`AMP_PRECISION`; balances are scaled 18-decimal integers.  Rounding
always favours the pool.  The invariant and balance solves iterate at most
:data:`MAX_ITERATIONS` times and raise :class:`ConvergenceError` rather than
return an unconverged value.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.constants import ONE
from ..core.errors import AmmErrorCode, ConvergenceError
from ..core.fixed_point import complement, div_down, div_up, int_div_up, mul_down, mul_up

AMP_PRECISION = 1000
MAX_ITERATIONS = 255


def _div(a: int, b: int, round_up: bool) -> int:
    return int_div_up(a, b) if round_up else a // b


def calculate_invariant(amp: int, balances: Sequence[int], round_up: bool) -> int:
    """Solve the StableSwap invariant ``D`` for ``balances``."""

    total = sum(balances)
    if total == 0:
        return 0
    n = len(balances)
    invariant = total
    amp_times_total = amp * n

    for _ in range(MAX_ITERATIONS):
        p_d = balances[0] * n
        for balance in balances[1:]:
            p_d = _div(p_d * balance * n, invariant, round_up)
        previous = invariant
        invariant = _div(
            n * invariant * invariant + _div(amp_times_total * total * p_d, AMP_PRECISION, round_up),
            (n + 1) * invariant + _div((amp_times_total - AMP_PRECISION) * p_d, AMP_PRECISION, not round_up),
            round_up,
        )
        if abs(invariant - previous) <= 1:
            return invariant
    raise ConvergenceError(AmmErrorCode.STABLE_INVARIANT_DIDNT_CONVERGE)


def balance_given_invariant(amp: int, balances: Sequence[int], invariant: int, token_index: int) -> int:
    """Balance of ``token_index`` that keeps ``invariant`` given all other balances."""

    n = len(balances)
    amp_times_total = amp * n
    total = balances[0]
    p_d = balances[0] * n
    for balance in balances[1:]:
        p_d = p_d * balance * n // invariant
        total += balance
    total -= balances[token_index]

    inv2 = invariant * invariant
    c = int_div_up(inv2, amp_times_total * p_d) * AMP_PRECISION * balances[token_index]
    b = total + invariant // amp_times_total * AMP_PRECISION

    token_balance = int_div_up(inv2 + c, invariant + b)
    for _ in range(MAX_ITERATIONS):
        previous = token_balance
        token_balance = int_div_up(token_balance * token_balance + c, token_balance * 2 + b - invariant)
        if abs(token_balance - previous) <= 1:
            return token_balance
    raise ConvergenceError(AmmErrorCode.STABLE_GET_BALANCE_DIDNT_CONVERGE)


# -----------------
# Swaps
# -----------------


def out_given_in(amp: int, balances: Sequence[int], index_in: int, index_out: int, amount_in: int) -> int:
    invariant = calculate_invariant(amp, balances, True)
    updated = list(balances)
    updated[index_in] += amount_in
    final_out = balance_given_invariant(amp, updated, invariant, index_out)
    return max(balances[index_out] - final_out - 1, 0)


def in_given_out(amp: int, balances: Sequence[int], index_in: int, index_out: int, amount_out: int) -> int:
    invariant = calculate_invariant(amp, balances, True)
    updated = list(balances)
    updated[index_out] -= amount_out
    final_in = balance_given_invariant(amp, updated, invariant, index_in)
    return final_in - balances[index_in] + 1


# -----------------
# Joins & exits
# -----------------


def bpt_out_given_exact_tokens_in(
    amp: int,
    balances: Sequence[int],
    amounts_in: Sequence[int],
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    """LP tokens minted for a possibly imbalanced deposit.

    Only the part of each deposit above the proportional share pays the swap
    fee.
    """

    total = sum(balances)
    ratios = [div_down(b + a, b) for b, a in zip(balances, amounts_in)]
    invariant_ratio = 0
    for balance, ratio in zip(balances, ratios):
        invariant_ratio += mul_down(ratio, div_down(balance, total))

    new_balances = []
    for balance, amount, ratio in zip(balances, amounts_in, ratios):
        if ratio > invariant_ratio:
            non_taxable = mul_down(balance, invariant_ratio - ONE)
            taxable = amount - non_taxable
            amount_without_fee = non_taxable + mul_down(taxable, ONE - swap_fee)
        else:
            amount_without_fee = amount
        new_balances.append(balance + amount_without_fee)

    current = calculate_invariant(amp, balances, True)
    new = calculate_invariant(amp, new_balances, False)
    ratio = div_down(new, current)
    return mul_down(bpt_total_supply, ratio - ONE) if ratio > ONE else 0


def token_in_given_exact_bpt_out(
    amp: int,
    balances: Sequence[int],
    token_index: int,
    bpt_out: int,
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    current = calculate_invariant(amp, balances, True)
    new_invariant = mul_up(div_up(bpt_total_supply + bpt_out, bpt_total_supply), current)
    new_balance = balance_given_invariant(amp, balances, new_invariant, token_index)
    amount_without_fee = new_balance - balances[token_index]

    weight = div_down(balances[token_index], sum(balances))
    taxable = mul_up(amount_without_fee, complement(weight))
    non_taxable = amount_without_fee - taxable
    return non_taxable + div_up(taxable, ONE - swap_fee)


def bpt_in_given_exact_tokens_out(
    amp: int,
    balances: Sequence[int],
    amounts_out: Sequence[int],
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    total = sum(balances)
    ratios = [div_up(b - a, b) for b, a in zip(balances, amounts_out)]
    invariant_ratio = 0
    for balance, ratio in zip(balances, ratios):
        invariant_ratio += mul_up(ratio, div_up(balance, total))

    new_balances = []
    for balance, amount, ratio in zip(balances, amounts_out, ratios):
        if invariant_ratio > ratio:
            non_taxable = mul_down(balance, complement(invariant_ratio))
            taxable = amount - non_taxable
            amount_with_fee = non_taxable + div_up(taxable, ONE - swap_fee)
        else:
            amount_with_fee = amount
        new_balances.append(balance - amount_with_fee)

    current = calculate_invariant(amp, balances, True)
    new = calculate_invariant(amp, new_balances, False)
    return mul_up(bpt_total_supply, complement(div_down(new, current)))


def token_out_given_exact_bpt_in(
    amp: int,
    balances: Sequence[int],
    token_index: int,
    bpt_in: int,
    bpt_total_supply: int,
    swap_fee: int,
) -> int:
    current = calculate_invariant(amp, balances, True)
    new_invariant = mul_up(div_up(bpt_total_supply - bpt_in, bpt_total_supply), current)
    new_balance = balance_given_invariant(amp, balances, new_invariant, token_index)
    amount_without_fee = balances[token_index] - new_balance

    weight = div_down(balances[token_index], sum(balances))
    taxable = mul_up(amount_without_fee, complement(weight))
    non_taxable = amount_without_fee - taxable
    return non_taxable + mul_down(taxable, ONE - swap_fee)


def tokens_out_given_exact_bpt_in(balances: Sequence[int], bpt_in: int, bpt_total_supply: int) -> list[int]:
    ratio = div_down(bpt_in, bpt_total_supply)
    return [mul_down(balance, ratio) for balance in balances]


__all__ = [
    "AMP_PRECISION",
    "MAX_ITERATIONS",
    "calculate_invariant",
    "balance_given_invariant",
    "out_given_in",
    "in_given_out",
    "bpt_out_given_exact_tokens_in",
    "token_in_given_exact_bpt_out",
    "bpt_in_given_exact_tokens_out",
    "token_out_given_exact_bpt_in",
    "tokens_out_given_exact_bpt_in",
]
