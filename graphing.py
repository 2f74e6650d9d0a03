import csv

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.ticker import MaxNLocator
from pyautogui import size
from rich.table import Table

from probabilities import calculate_turn_probabilities
from strategy import (
    calculate, calculate_no_mulligan_success, current_context, mull_strat_multi_type,
    mulligan_breakdown, optimize_strategy,
)
from utility import *


def graph_set_up(x_label, integer_x=True):
    width, height = size()
    fig, ax = plt.subplots(figsize=(width / 150, height / 150))
    fig.patch.set_facecolor('black')
    ax.set_facecolor('black')
    ax.set_xlabel(x_label, color='white')
    ax.set_ylabel("Probability", color='white')
    ax.tick_params(colors='white')
    ax.set_yticks(np.arange(0, 1.01, 0.1))
    ax.set_yticks(np.arange(0, 1.01, 0.02), minor=True)
    ax.grid(True, linestyle='--', alpha=0.5, color='white')
    if integer_x:
        ax.xaxis.set_major_locator(MaxNLocator(integer=True))
    ax.set_ylim(0, 1)
    ax.spines['bottom'].set_color('white')
    ax.spines['left'].set_color('white')
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.spines['bottom'].set_linewidth(1.5)
    ax.spines['left'].set_linewidth(1.5)
    return fig, ax


def finish_plot(ax, title):
    legend = ax.legend(facecolor='black', edgecolor='white')
    for text in legend.get_texts():
        text.set_color('white')
    plt.title(title, color='white')
    plt.tight_layout()


def turn_probability_series(context):
    turn_data = calculate_turn_probabilities(context)
    x_vals = np.array([row.turn for row in turn_data])
    series = {}
    for i, card_type in enumerate(context.types):
        series[f"{card_type.name or f'Type {i + 1}'} ({card_type.required}+)"] = np.array([row.type_probabilities[i] for row in turn_data])
    series["All requirements"] = np.array([row.combined_prob for row in turn_data])
    return x_vals, series


def threshold_sweep_series(context, thresholds=None):
    thresholds = np.round(np.arange(0.05, 1.0001, 0.05), 2) if thresholds is None else np.asarray(thresholds)
    base = mull_strat_multi_type(context)
    baseline = calculate_no_mulligan_success(base.strategy)
    expected, keep = [], []
    for threshold in thresholds:
        result = optimize_strategy(context.with_threshold(float(threshold)), base.strategy)
        expected.append(result.expected_success)
        keep.append(result.keep_prob)
    return thresholds, {
        "Expected success": np.array(expected),
        "Keep opening hand": np.array(keep),
        "Never mulligan": np.full(len(thresholds), baseline),
    }


def print_series_table(title, x_label, x_vals, series):
    table = Table(title=title, show_header=True, header_style="bold white")
    table.add_column(x_label, style="bold")
    for name in series:
        table.add_column(name, justify="right", style="cyan")
    csv_data = [[x_label] + list(series)]
    for j, x_val in enumerate(x_vals):
        row = [str(x_val)] + [f"{values[j]:.4f}" for values in series.values()]
        table.add_row(*row)
        csv_data.append(row)
    console.print(table)
    return csv_data


def export_csv(csv_data, default_name):
    if not get_yes_no("Export table to CSV?"):
        return
    csv_filename = console.input(f"[prompt]Enter CSV filename (default: {default_name}) > [/prompt]").strip() or default_name
    if not csv_filename.endswith('.csv'):
        csv_filename += '.csv'
    try:
        with open(csv_filename, 'w', newline='') as csvfile:
            csv.writer(csvfile).writerows(csv_data)
        console.print(f"[success]Saved {csv_filename}.[/success]")
    except OSError as e:
        console.print(f"[error]Failed to write CSV file: {e}[/error]")


def plot_lines(x_label, x_vals, series, title, integer_x=True):
    colors = DEFAULT_COLORS
    fig, ax = graph_set_up(x_label, integer_x)
    for i, (name, values) in enumerate(series.items()):
        ax.plot(x_vals, values, linestyle='-', marker='o', color=colors[i % len(colors)], label=name)
    finish_plot(ax, title)
    plt.show()


def plot_breakdown(rows):
    fig, ax = graph_set_up("Mulligan Step")
    x_vals = np.arange(len(rows))
    ax.bar(x_vals - 0.2, [r.marginal_keep for r in rows], width=0.4, color=DEFAULT_COLORS[1], label="Keep at this step")
    ax.bar(x_vals + 0.2, [r.cumulative_success for r in rows], width=0.4, color=DEFAULT_COLORS[0], label="Cumulative success")
    ax.set_xticks(x_vals)
    ax.set_xticklabels([r.label.split('(')[0].strip() for r in rows], color='white', rotation=20)
    finish_plot(ax, "Mulligan Breakdown")
    plt.show()


def page_graph():
    clear_screen()
    console.print("[header][6] Graphs[/header]\n")

    try:
        context = current_context()
    except ValueError as e:
        console.print(f"[error]{e}[/error]")
        pause()
        return
    if context.deck_size <= 0 or not context.types:
        console.print("[error]Set a deck size and at least one card type first.[/error]")
        pause()
        return

    console.print("[info]Select graph type:[/info]")
    console.print("[info]1. Turn-by-Turn Probability[/info]")
    console.print("[info]2. Mulligan Breakdown[/info]")
    console.print("[info]3. Confidence Threshold Sweep[/info]")
    graph_type = console.input("[prompt]> [/prompt]")

    match graph_type:
        case "1":
            x_vals, series = turn_probability_series(context)
            csv_data = print_series_table("Probability of meeting each requirement", "Turn", x_vals, series)
            plot_lines("Turn", x_vals, series, "Turn-by-Turn Probability")
            export_csv(csv_data, "turn_probabilities.csv")
        case "2":
            with console.status("[info]Computing optimal strategy...[/info]"):
                result = calculate(context, session["cache"])
            rows = mulligan_breakdown(result, context.free_mulligan, context.penalty)
            series = {
                "Keep at this step": np.array([r.marginal_keep for r in rows]),
                "Success if kept": np.array([r.success_if_kept for r in rows]),
                "Cumulative keep": np.array([r.cumulative_keep for r in rows]),
                "Cumulative success": np.array([r.cumulative_success for r in rows]),
            }
            csv_data = print_series_table("Mulligan Breakdown", "Step", [r.label for r in rows], series)
            plot_breakdown(rows)
            export_csv(csv_data, "mulligan_breakdown.csv")
        case "3":
            with console.status("[info]Sweeping confidence thresholds...[/info]"):
                x_vals, series = threshold_sweep_series(context)
            csv_data = print_series_table("Confidence Threshold Sweep", "Threshold", x_vals, series)
            plot_lines("Confidence Threshold", x_vals, series, "Strategy vs Confidence Threshold", integer_x=False)
            export_csv(csv_data, "threshold_sweep.csv")
        case _:
            console.print("[error]Invalid graph type.[/error]")

    pause()
