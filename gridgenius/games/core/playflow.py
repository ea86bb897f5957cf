# gridgenius/games/core/playflow.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, List
from time import time

Outcome = str  # 'solved_no_help'|'solved_with_help'|'unsolved_exit'|'time_up'


def now_ms() -> int:
    return int(time() * 1000)


@dataclass
class RoundPlay:
    round_no: int
    target: int
    started_at_ms: int = field(default_factory=now_ms)
    ended_at_ms: Optional[int] = None
    attempts: int = 0
    incorrect_attempts: int = 0
    helped: bool = False
    solved: bool = False
    final_outcome: Optional[Outcome] = None
    last_result: Optional[int] = None

    def mark_end(self, outcome: Outcome, at_ms: Optional[int] = None):
        if self.ended_at_ms is None:
            self.ended_at_ms = at_ms if at_ms is not None else now_ms()
        self.final_outcome = outcome

    @property
    def elapsed_ms(self) -> Optional[int]:
        if self.ended_at_ms is None:
            return None
        return max(0, self.ended_at_ms - self.started_at_ms)


@dataclass
class Playflow:
    """Per-session record of every round played."""
    started_at_ms: int = field(default_factory=now_ms)
    current: Optional[RoundPlay] = None
    rounds: List[RoundPlay] = field(default_factory=list)

    # ---- lifecycle ----
    def start_round(self, round_no: int, target: int, at_ms: Optional[int] = None):
        # A round left hanging is closed as unsolved_exit
        if self.current and not self.current.final_outcome:
            self.current.mark_end('unsolved_exit', at_ms)
        rp = RoundPlay(round_no=round_no, target=target,
                       started_at_ms=at_ms if at_ms is not None else now_ms())
        self.rounds.append(rp)
        self.current = rp

    def submit(self, correct: bool, result: Optional[int] = None, at_ms: Optional[int] = None):
        if not self.current or self.current.final_outcome:
            return
        self.current.attempts += 1
        self.current.last_result = result
        if correct:
            self.current.solved = True
            outcome = 'solved_with_help' if self.current.helped else 'solved_no_help'
            self.current.mark_end(outcome, at_ms)
        else:
            self.current.incorrect_attempts += 1

    def help(self):
        if not self.current:
            return
        self.current.helped = True

    def finalize(self, outcome: Outcome = 'unsolved_exit', at_ms: Optional[int] = None):
        """Close the open round, if any (session end, timer expiry)."""
        if self.current and not self.current.final_outcome:
            self.current.mark_end(outcome, at_ms)

    # ---- readout ----
    def summary(self, finalize: bool = True) -> Dict:
        if finalize:
            self.finalize()

        totals = dict(solved=0, helped=0, incorrect=0, attempts=0)
        per_round: List[Dict] = []
        buckets = dict(
            solved_rounds=[],
            solved_no_help_rounds=[],
            solved_with_help_rounds=[],
            first_try_rounds=[],
            struggled_rounds=[],
            unsolved_rounds=[],
        )

        for it in self.rounds:
            totals['attempts'] += it.attempts
            if it.solved: totals['solved'] += 1
            if it.helped: totals['helped'] += 1
            if it.incorrect_attempts > 0: totals['incorrect'] += 1

            if it.solved:
                buckets['solved_rounds'].append(it.round_no)
                if it.helped: buckets['solved_with_help_rounds'].append(it.round_no)
                else: buckets['solved_no_help_rounds'].append(it.round_no)
                if it.attempts == 1: buckets['first_try_rounds'].append(it.round_no)
                if it.incorrect_attempts > 0: buckets['struggled_rounds'].append(it.round_no)
            else:
                buckets['unsolved_rounds'].append(it.round_no)

            per_round.append(dict(
                round=it.round_no,
                target=it.target,
                final_outcome=it.final_outcome,
                attempts=it.attempts,
                incorrect_attempts=it.incorrect_attempts,
                helped=it.helped,
                solved=it.solved,
                elapsed_ms=it.elapsed_ms,
            ))

        def f(ids: List[int]) -> str:
            return ", ".join(str(x) for x in ids) if ids else "-"

        accuracy = (totals['solved'] / totals['attempts']) if totals['attempts'] else 0.0
        report_lines = [
            "Totals",
            f"  Solved:    {totals['solved']}/{len(self.rounds)}",
            f"  Helped:    {totals['helped']}",
            f"  Incorrect: {totals['incorrect']}",
            f"  Accuracy:  {accuracy:.0%}",
            "",
            "Rounds",
            f"  Solved (no help) [{len(buckets['solved_no_help_rounds'])}]: {f(buckets['solved_no_help_rounds'])}",
            f"  Solved (with help) [{len(buckets['solved_with_help_rounds'])}]: {f(buckets['solved_with_help_rounds'])}",
            f"  First try [{len(buckets['first_try_rounds'])}]: {f(buckets['first_try_rounds'])}",
            f"  Unsolved [{len(buckets['unsolved_rounds'])}]: {f(buckets['unsolved_rounds'])}",
        ]

        return dict(
            started_at_ms=self.started_at_ms,
            totals=totals,
            accuracy=round(accuracy, 4),
            per_round=per_round,
            buckets=buckets,
            report_text="\n".join(report_lines),
        )
