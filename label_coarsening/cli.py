#!/usr/bin/env python3
"""
Command line entry point: cluster an edge list with size-constrained label
propagation and write the node -> cluster mapping.
"""
import numpy as np
import pandas as pd
import click

from .config import LabelPropagationConfig, NODE_ORDERINGS
from .contraction import contract_graph
from .graph_access import GraphAccess
from .random_functions import RandomBits
from .size_constraint_label_propagation import SizeConstraintLabelPropagation, perf_monitor


def read_edge_list(path, header=False):
    """Read ``source target [weight]`` rows, comma or whitespace separated."""
    df = pd.read_csv(path, sep=r"[,\s]+", engine="python", comment="#",
                     header=0 if header else None)
    if df.shape[1] not in (2, 3):
        raise click.BadParameter(f"expected 2 or 3 columns, got {df.shape[1]}",
                                 param_hint="EDGES")
    sources = df.iloc[:, 0].to_numpy(dtype=np.int64)
    targets = df.iloc[:, 1].to_numpy(dtype=np.int64)
    weights = df.iloc[:, 2].to_numpy() if df.shape[1] == 3 else None
    return sources, targets, weights


def read_node_weights(path):
    """One integer weight per line, in node order."""
    return pd.read_csv(path, header=None, comment="#").iloc[:, 0].to_numpy(dtype=np.int64)


@click.command()
@click.argument('edges', type=click.Path(exists=True, dir_okay=False))
@click.option('--upper-bound', type=float, required=True,
              help="Maximum total node weight of a cluster (rounded up).")
@click.option('--iterations', type=int, default=10, show_default=True,
              help="Number of label propagation passes.")
@click.option('--ordering', type=click.Choice(NODE_ORDERINGS), default='degree', show_default=True,
              help="Node visitation order.")
@click.option('--seed', type=int, default=0, show_default=True,
              help="Seed for tie-breaking and random ordering.")
@click.option('--n-nodes', type=int, default=None,
              help="Number of nodes (default: largest id in EDGES + 1).")
@click.option('--node-weights', type=click.Path(exists=True, dir_okay=False), default=None,
              help="File with one integer node weight per line.")
@click.option('--header/--no-header', default=False,
              help="EDGES starts with a header row.")
@click.option('--stop-on-convergence/--fixed-passes', default=False,
              help="Stop after the first pass in which no node moves.")
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help="CSV file for the node,cluster mapping (default: stdout).")
@click.option('--contract-output', type=click.Path(dir_okay=False), default=None,
              help="CSV file for the contracted graph's edge list.")
@click.option('--verbose/--quiet', default=False,
              help="Print progress and timing statistics.")
def main(edges, upper_bound, iterations, ordering, seed, n_nodes, node_weights, header,
         stop_on_convergence, output, contract_output, verbose):
    """Cluster the graph in EDGES for one coarsening step."""
    perf_monitor.enabled = verbose
    perf_monitor.reset()

    try:
        config = LabelPropagationConfig(
            upper_bound_partition=upper_bound,
            label_iterations=iterations,
            node_ordering=ordering,
            random_state=seed,
            stop_on_convergence=stop_on_convergence,
            verbose=verbose,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc))

    with perf_monitor.timed_operation("Graph loading", verbose=verbose):
        sources, targets, weights = read_edge_list(edges, header=header)
        weights_per_node = read_node_weights(node_weights) if node_weights else None
        try:
            graph = GraphAccess.from_edge_list(sources, targets, weights,
                                               n_nodes=n_nodes, node_weights=weights_per_node)
        except ValueError as exc:
            raise click.UsageError(str(exc))
    if verbose:
        print(f"Loaded {graph}")

    result = SizeConstraintLabelPropagation().match(config, graph, rng=RandomBits(seed))

    mapping_df = pd.DataFrame({
        'node': np.arange(graph.number_of_nodes()),
        'cluster': result.coarse_mapping,
    })
    if output:
        mapping_df.to_csv(output, index=False)
    else:
        click.echo(mapping_df.to_csv(index=False), nl=False)

    if contract_output:
        coarse = contract_graph(graph, result.coarse_mapping, result.n_clusters)
        coo = coarse.graph.tocoo()
        upper = coo.row <= coo.col
        pd.DataFrame({
            'source': coo.row[upper],
            'target': coo.col[upper],
            'weight': coo.data[upper],
        }).to_csv(contract_output, index=False)

    click.echo(f"{graph.number_of_nodes()} nodes -> {result.n_clusters} clusters", err=True)


if __name__ == "__main__":
    main()
