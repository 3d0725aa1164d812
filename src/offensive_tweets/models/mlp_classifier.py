# mlp_classifier.py
import logging
from typing import Any, Dict

import numpy as np
import torch
import torch.nn as nn
from torch.utils.data import Dataset, DataLoader

from ..core.errors import FitFailureError

LOGGER = logging.getLogger(__name__)


class _FeatureDS(Dataset):
    def __init__(self, X, y):
        self.X = torch.as_tensor(X, dtype=torch.float32)
        self.y = torch.as_tensor(y, dtype=torch.long)
    def __len__(self): return len(self.X)
    def __getitem__(self, i): return self.X[i], self.y[i]


class MLPNet(nn.Module):
    def __init__(self, in_dim, hid_dim, num_classes=2, dropout=0.2):
        super().__init__()
        self.hidden = nn.Linear(in_dim, hid_dim)
        self.proj = nn.Linear(hid_dim, num_classes)
        self.drop = nn.Dropout(dropout)

    def forward(self, x):
        return self.proj(self.drop(torch.relu(self.hidden(x))))


class MLPClassifier:
    """
    One-hidden-layer feed-forward classifier over a recipe's feature matrix.

    Training runs on CPU inside a forked torch RNG so a seeded fit is
    reproducible and leaves the global generator untouched.
    """

    def __init__(self, **params: Dict[str, Any]):
        self.p = params
        self.device = torch.device(self.p.get("device", "cpu"))
        self.model = None
        self.classes_ = None

    def fit(self, X, y):
        X = np.asarray(X, dtype=np.float32)
        y = np.asarray(y)
        self.classes_, y_idx = np.unique(y, return_inverse=True)
        if len(self.classes_) < 2:
            raise FitFailureError(f"MLP needs at least two classes, got {list(self.classes_)}")

        seed = self.p.get("random_state")
        seed = 0 if seed is None else int(seed)
        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(seed)
            gen = torch.Generator().manual_seed(seed)
            dl = DataLoader(
                _FeatureDS(X, y_idx),
                batch_size=self.p.get("batch_size", 64),
                shuffle=True,
                generator=gen,
            )
            self.model = MLPNet(
                in_dim=X.shape[1],
                hid_dim=self.p.get("hidden_dim", 64),
                num_classes=len(self.classes_),
                dropout=self.p.get("dropout", 0.2),
            ).to(self.device)

            optim = torch.optim.AdamW(
                self.model.parameters(),
                lr=self.p.get("lr", 1e-3),
                weight_decay=self.p.get("weight_decay", 1e-4),
            )
            lossf = nn.CrossEntropyLoss()

            epochs = self.p.get("epochs", 20)
            for ep in range(1, epochs + 1):
                self.model.train()
                total = 0.0
                for xb, yb in dl:
                    xb, yb = xb.to(self.device), yb.to(self.device)
                    optim.zero_grad()
                    loss = lossf(self.model(xb), yb)
                    loss.backward()
                    optim.step()
                    total += loss.item()
                mean_loss = total / max(1, len(dl))
                if not np.isfinite(mean_loss):
                    raise FitFailureError(f"MLP loss diverged at epoch {ep}")
                LOGGER.debug("[MLP] epoch %d/%d loss=%.4f", ep, epochs, mean_loss)
        return self

    def _logits(self, X):
        if self.model is None:
            raise RuntimeError("MLPClassifier is not fitted")
        self.model.eval()
        with torch.no_grad():
            xb = torch.as_tensor(np.asarray(X, dtype=np.float32)).to(self.device)
            return self.model(xb).cpu()

    def predict_proba(self, X):
        return torch.softmax(self._logits(X), dim=-1).numpy()

    def predict(self, X):
        return self.classes_[self._logits(X).argmax(-1).numpy()]


def build_mlp(params: Dict[str, Any]) -> MLPClassifier:
    return MLPClassifier(**params)
