"""Ein-/Ausgabe."""
