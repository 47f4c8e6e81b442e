import numpy as np
import sys
import time
import subprocess
import os
import csv
from statistics import mean, stdev
from math import sqrt

from engine import INFINITY, NO_PRED, UNREACHED

PARALLEL_SCRIPT = os.path.join(os.path.dirname(os.path.abspath(__file__)), "parallel_script.py")


def generate_digraph(n, density=0.5, seed=42):
    rng = np.random.default_rng(seed)
    D = rng.integers(1, 100, size=(n, n)).astype(np.int64)
    D[rng.random((n, n)) >= density] = INFINITY
    np.fill_diagonal(D, 0)
    return D


def dijkstra_sequential(D, source=0):
    n = D.shape[0]
    dist = np.where(D[source] < INFINITY, D[source], UNREACHED).astype(np.int64)
    pred = np.full(n, source, dtype=np.int64)
    known = np.zeros(n, dtype=bool)
    dist[source] = 0
    pred[source] = NO_PRED
    known[source] = True

    start_time = time.time()
    for _ in range(1, n):
        u = -1
        min_dist = UNREACHED
        for v in range(n):
            if not known[v] and dist[v] < min_dist:
                u = v
                min_dist = dist[v]
        if u < 0:
            continue
        known[u] = True
        for v in range(n):
            if not known[v] and D[u, v] < INFINITY:
                if min_dist + D[u, v] < dist[v]:
                    dist[v] = min_dist + D[u, v]
                    pred[v] = u
    total_time = time.time() - start_time
    return dist, pred, total_time


def compare_results(sequential_result, parallel_result_file, num_processes):
    if not os.path.exists(parallel_result_file):
        print(f"numprocs {parallel_result_file} file not found.")
        return False

    seq_dist, seq_pred = sequential_result
    with np.load(parallel_result_file) as parallel:
        same = (np.array_equal(seq_dist, parallel["dist"])
                and np.array_equal(seq_pred, parallel["pred"]))
    if same:
        print(f"numprocs {num_processes} result ok.")
    else:
        print(f"numprocs {num_processes} result DIFFER.")
    return same


def run_parallel_version(input_file, output_dir, num_processes, sequential_result, num_repeats):
    times = []
    for run in range(num_repeats):
        command = ["mpiexec", "-np", str(num_processes),
                   sys.executable, PARALLEL_SCRIPT, input_file,
                   "--output-dir", output_dir]

        print(f"\nRun {run+1}/{num_repeats}: {' '.join(command)}")
        try:
            result = subprocess.run(
                command, capture_output=True, text=True, check=True)
            for line in result.stdout.splitlines():
                if "Time with" in line and "processes" in line:
                    print(line)
                    try:
                        time_str = line.split(":")[-1].strip().split(" ")[0]
                        times.append(float(time_str))
                    except ValueError:
                        print(f"Failed to parse time from line: {line}")
        except subprocess.CalledProcessError as e:
            print("Subprocess failed:")
            print(f"Stdout: {e.stdout}")
            print(f"Stderr: {e.stderr}")

    parallel_result_file = os.path.join(
        output_dir, f"parallel_result_{num_processes}.npz")
    compare_results(sequential_result, parallel_result_file, num_processes)

    if times:
        mean_time = mean(times)
        stderr = stdev(times) / sqrt(num_repeats) if len(times) > 1 else 0.0
        return mean_time, stderr
    return None, None


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: python main.py <number_of_vertices> <max_number_of_processes> <num_repeats>")
        sys.exit(1)

    n = int(sys.argv[1])
    max_processes = int(sys.argv[2])
    num_repeats = int(sys.argv[3])

    output_dir = "dijkstra_output"
    os.makedirs(output_dir, exist_ok=True)
    print(f"All output files will be saved to: {output_dir}")

    print(f"Generating directed graph with {n} vertices...")
    graph = generate_digraph(n)
    input_file = os.path.join(output_dir, "input_graph.npy")
    np.save(input_file, graph)

    print("\nRunning sequential Dijkstra algorithm...")
    seq_dist, seq_pred, seq_time = dijkstra_sequential(graph)
    np.savez(os.path.join(output_dir, "sequential_result.npz"), dist=seq_dist, pred=seq_pred)
    print(f"Sequential version time: {seq_time:.4f} seconds")

    parallel_stats = {}

    # The block-column layout needs the process count to divide n.
    process_counts = [p for p in range(1, max_processes + 1) if n % p == 0]
    print(f"\nRunning parallel Dijkstra algorithm with {process_counts} processes...")
    for num_processes in process_counts:
        mean_time, stderr = run_parallel_version(
            input_file, output_dir, num_processes, (seq_dist, seq_pred), num_repeats)
        if mean_time is not None:
            parallel_stats[num_processes] = (mean_time, stderr)

    print("\nExecution time summary:")
    print(f"Sequential version: {seq_time:.4f} seconds")
    for num_procs, (mean_time, stderr) in parallel_stats.items():
        print(
            f"Parallel ({num_procs} proc): mean = {mean_time:.4f}s, stderr = {stderr:.4f}s")

    csv_dir = "csv_result"
    os.makedirs(csv_dir, exist_ok=True)

    csv_filename = os.path.join(
        csv_dir, f"execution_times_n{n}_maxp{max_processes}.csv")
    with open(csv_filename, "w", newline='') as f:
        writer = csv.writer(f)
        writer.writerow(["numprocs", "mean_time (s)", "stderr (s)"])

        # Sequential reference gets its own row
        writer.writerow(["seq", f"{seq_time:.4f}", "0.0000"])

        for num_procs in sorted(parallel_stats.keys()):
            mean_time, stderr = parallel_stats[num_procs]
            writer.writerow([num_procs, f"{mean_time:.4f}", f"{stderr:.4f}"])
