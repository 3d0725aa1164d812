"""
Offensive tweet classification harness.

Feature recipes (fittable text -> feature matrix pipelines) are benchmarked
against several classifier families with k-fold cross-validation and grid
search; the best (recipe, model, hyperparameters) combination is refit on all
training documents and used to predict held-out tweets.

Key modules:
- core: documents, lexicons/embeddings, CV splitter, metrics, errors
- recipes: tokenization, filters, vectorizers, lexicon features, Recipe
- models: model registry (majority, penalized LogReg, SVM, RF, torch MLP)
- experiments: tuning engine, metrics collector, selector, final trainer, pipeline
"""

__version__ = "0.1.0"
