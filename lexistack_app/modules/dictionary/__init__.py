"""Dictionary module: word lookups against the Learner's Dictionary."""
