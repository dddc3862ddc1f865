import os
import logging
from typing import Iterator, Iterable, Optional

from alpr_stage.domain.Interfaces.work_source import IWorkSource
from alpr_stage.domain.Models.work_unit import WorkUnit

logger = logging.getLogger(__name__)


class DirectoryWorkSource(IWorkSource):
    """
    Lee imágenes de un directorio como work units (orden alfabético).
    Con consume=True borra cada archivo después de entregarlo, para poder
    hacer polling sobre el mismo directorio.
    """

    def __init__(self, input_dir: str, extensions: Optional[Iterable[str]] = None, consume: bool = False):
        self.input_dir = input_dir
        self.extensions = tuple(e.lower() for e in (extensions or (".jpg", ".jpeg", ".png", ".bmp")))
        self.consume = consume

    def units(self) -> Iterator[WorkUnit]:
        if not os.path.isdir(self.input_dir):
            logger.warning("Directorio de entrada inexistente: %s", self.input_dir)
            return

        for name in sorted(os.listdir(self.input_dir)):
            path = os.path.join(self.input_dir, name)
            if not os.path.isfile(path) or not name.lower().endswith(self.extensions):
                continue

            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError:
                logger.exception("No se pudo leer %s, se omite", path)
                continue

            yield WorkUnit(unit_id=name, data=data, attributes={"path": path})

            if self.consume:
                os.remove(path)
