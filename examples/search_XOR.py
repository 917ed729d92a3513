"""
XOR Problem Solved by Architecture and Weight Search

This module runs the classic XOR (exclusive OR) benchmark through a pipeline
of searches. XOR is not linearly separable, so a graph connecting the inputs
directly to the outputs cannot solve it; the architecture search has to
discover hidden neurons first.

The XOR Problem:
    XOR is a two-input boolean function which is True only when the inputs differ:
        Input (0, 0) → False
        Input (0, 1) → True
        Input (1, 0) → True
        Input (1, 1) → False

    It is posed here as a two-class problem: output neuron 4 stands for
    'False' and output neuron 5 for 'True'. A third input (ID 3) is held
    at 1.0 and acts as a bias.

Pipeline:
    1. ParallelNAS:             insert neurons of random kinds
    2. ConnectionSearch:        add missing connections
    3. HillClimber:             tune the weights
    4. TargetedMicroRefinement: nudge the outputs on nearly correct cases

    Each stage starts from the result of the previous one.

Functions:
    xor_sessions():     The four XOR cases as labeled sessions
    truth_table():      Format a graph's predictions on the XOR cases
    run_pipeline():     Run all stages and return the final SearchResult

Usage:
    python search_XOR.py                    # default configuration
    python search_XOR.py config_xor.ini     # configuration from file
"""

import sys
from pathlib import Path

from neurosearch import (Blueprint,
                         Config,
                         ConnectionSearch,
                         HillClimber,
                         ParallelNAS,
                         Session,
                         TargetedMicroRefinement,
                         evaluate_advanced)
from neurosearch.evaluation import predict_sessions

def xor_sessions() -> list[Session]:
    sessions = []
    for a in (0.0, 1.0):
        for b in (0.0, 1.0):
            is_true = a != b
            sessions.append(Session(inputs           = {1: a, 2: b, 3: 1.0},
                                    expected_outputs = {4: 0.0 if is_true else 1.0,
                                                        5: 1.0 if is_true else 0.0}))
    return sessions

def truth_table(blueprint: Blueprint, sessions: list[Session], config: Config) -> str:
    """
    Format the class probabilities a graph predicts for every XOR case.

    The graph is cloned, so its neuron state is left untouched.
    """
    predictions = predict_sessions(blueprint.clone(),
                                   sessions,
                                   dropout_enabled = config.dropout_enabled,
                                   reset_state     = config.reset_state_between_sessions)

    s  = "input        P(False)  P(True)  expected\n"
    s += "-----------------------------------------\n"
    for session, predicted in zip(sessions, predictions):
        a, b     = session.inputs[1], session.inputs[2]
        expected = "True" if session.expected_class == 5 else "False"
        s += f"({a:.0f}, {b:.0f})  ->   {predicted[4]:.4f}    {predicted[5]:.4f}   {expected}\n"
    return s

def run_pipeline(config: Config):
    sessions  = xor_sessions()
    blueprint = Blueprint.create(num_inputs=3, num_outputs=2)

    stages = [ParallelNAS, ConnectionSearch, HillClimber, TargetedMicroRefinement]
    result = None
    for stage in stages:
        result    = stage(config).run(blueprint, sessions)
        blueprint = result.blueprint

        # stop as soon as every case is classified correctly
        if result.evaluation.exact >= 100.0:
            break

    return result

if __name__ == "__main__":
    config_file = sys.argv[1] if len(sys.argv) > 1 else None
    if config_file is None and (Path(__file__).parent / "config_xor.ini").exists():
        config_file = str(Path(__file__).parent / "config_xor.ini")
    config = Config(config_file)

    result = run_pipeline(config)

    evaluation, advanced = evaluate_advanced(result.blueprint.clone(),
                                             xor_sessions(),
                                             forgiveness_threshold = config.forgiveness_threshold,
                                             dropout_enabled       = config.dropout_enabled,
                                             reset_state           = config.reset_state_between_sessions)
    s  = "\nRESULT:\n"
    s += f"{evaluation}\n"
    s += f"weighted proximity = {advanced['weighted_proximity']:.4f}\n"
    s += f"class sensitivity  = {advanced['class_sensitivity']:.4f}\n"
    s += f"decile consistency = {advanced['decile_consistency']:.2f}%\n\n"
    s += str(result.blueprint)
    s += "\n\n"
    s += truth_table(result.blueprint, xor_sessions(), config)
    print(s)

    # Save the graph and render it
    Path("xor_blueprint.json").write_text(result.blueprint.to_json())
    try:
        result.blueprint.visualize(view=False).render("xor_blueprint", format="pdf", cleanup=True)
        print("Network visualization saved as 'xor_blueprint.pdf'")
    except Exception as e:
        print(f"Could not visualize network: {e}")
