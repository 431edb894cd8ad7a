"""Statistics collectors: a discarding base collector and in-memory Prometheus-style metrics."""