# slipstream/data/hdf5_writer.py
from datetime import datetime
from typing import List

import h5py
import numpy as np

from ..drag_history import DragRecord

# UTF-8 variable-length string dtype for HDF5
vtype_dtype = h5py.string_dtype(encoding="utf-8")
compound_dtype = np.dtype([
    ("timestamp", np.int64),  # Timestamp in seconds
    ("vehicle_id", np.int64),
    ("vehicle_type", vtype_dtype),
    ("platoon_size", np.int32),
    ("position", np.int32),
    ("ratio", np.float64),
    ("drag_coefficient", np.float64),
])


class HDF5Writer:
    def __init__(self, filename, dataset_name: str = "drag"):
        self.file = h5py.File(filename, "a")

        if dataset_name not in self.file or not isinstance(self.file[dataset_name], h5py.Dataset):
            self.dataset = self.file.create_dataset(
                dataset_name,
                shape=(0,),
                maxshape=(None,),
                dtype=compound_dtype,
                chunks=True,
                compression="gzip",
            )
        else:
            self.dataset = self.file[dataset_name]
        self.index = self.dataset.shape[0]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def save_dataset_info(self, data_path: str, record_count: int, departure_time: datetime):
        if 'data_path' not in self.file.attrs:
            self.file.attrs['data_path'] = str(data_path)
        if 'record_count' not in self.file.attrs:
            self.file.attrs['record_count'] = record_count
        if 'departure_time' not in self.file.attrs:
            self.file.attrs['departure_time'] = departure_time.isoformat()
        self.file.flush()

    def append_file(self, buffer: List[DragRecord]):
        rows = [
            (int(r.datetime.timestamp()), int(r.vehicle_id), str(r.vehicle_type), int(r.platoon_size),
             int(r.position), float(r.ratio), float(r.drag_coefficient))
            for r in buffer
        ]
        if len(rows) == 0:
            return 0

        data = np.array(rows, dtype=compound_dtype)

        data_len = len(data)
        self.dataset.resize((self.index + data_len,))
        self.dataset[self.index:self.index + data_len] = data
        self.index += data_len
        self.file.flush()
        return data_len

    def close(self):
        self.file.close()
