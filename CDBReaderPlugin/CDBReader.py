"""
ANSYS CDB Reader Plugin for ParaView
====================================

A ParaView file reader plugin for ANSYS mesh export files (.cdb extension).

This plugin provides:
- Direct reading of .cdb files in ParaView
- Linear and quadratic solid and shell elements
- Partition (element block) selection and coloring
- Node components as point arrays
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Ensure we can import the reader modules when loaded as a Python plugin
_here = os.path.abspath(os.path.dirname(__file__))
_root = os.path.dirname(_here)
if _root not in sys.path:
    sys.path.insert(0, _root)

from cdb_errors import ParseError
from cdb_mesh import Mesh
from cdb_parser import CDBReader as CDBFileReader
from cdb_vtk import to_vtk_grid

from paraview.util.vtkAlgorithm import *
from vtkmodules.vtkCommonDataModel import vtkUnstructuredGrid
from vtkmodules.vtkCommonCore import vtkDataArraySelection
from vtkmodules.numpy_interface import dataset_adapter as dsa


class CDBParaViewModule:
    """
    ParaView-friendly wrapper around the CDB file reader.

    Reads the file once, keeps the mesh and answers the queries the
    reader proxy needs without printing to the console.
    """

    def __init__(self, filepath: str):
        self.filepath = Path(filepath)
        self.mesh = Mesh()
        self.reader = CDBFileReader(self.mesh)
        self._parsed = False

    def parse_all_data(self) -> bool:
        """
        Read the file. Returns True if successful, False otherwise.
        """
        if self._parsed:
            return True
        try:
            self.reader.read(self.filepath)
        except ParseError:
            return False
        self._parsed = True
        return True

    def get_partition_names(self) -> Dict[str, int]:
        """Partition name -> partition id"""
        if not self._parsed:
            self.parse_all_data()
        return {self.mesh.partition_name(pid) or f"Partition {pid}": pid
                for pid in self.mesh.partition_ids()}


def createModifiedCallback(anobject):
    """Create a modified callback for property changes"""
    import weakref
    weakref_obj = weakref.ref(anobject)
    anobject = None
    def _markmodified(*args, **kwargs):
        o = weakref_obj()
        if o is not None:
            o.Modified()
    return _markmodified


@smproxy.reader(name="CDBReader",
                label="ANSYS CDB File Reader",
                extensions="cdb",
                file_description="ANSYS CDB Files")
class CDBReader(VTKPythonAlgorithmBase):
    """
    ParaView reader for ANSYS mesh export files (.cdb)

    Every element block (and every topology within a block) becomes a
    partition that can be toggled in the Partitions selection.
    """

    def __init__(self):
        VTKPythonAlgorithmBase.__init__(self,
            nInputPorts=0,
            nOutputPorts=1,
            outputType='vtkUnstructuredGrid')

        self._filename = None
        self._module: Optional[CDBParaViewModule] = None

        self._partition_selection = vtkDataArraySelection()
        self._partition_selection.AddObserver("ModifiedEvent", createModifiedCallback(self))

    def _ensure_module(self):
        """Read the file if not already done"""
        if self._module is None:
            if not self._filename or not os.path.exists(self._filename):
                raise RuntimeError(f"File not found or not accessible: {self._filename}")
            module = CDBParaViewModule(self._filename)
            if not module.parse_all_data():
                raise RuntimeError(f"Failed to parse CDB file: {self._filename}")
            self._module = module

    def _get_available_partitions(self) -> List[str]:
        try:
            self._ensure_module()
            return list(self._module.get_partition_names())
        except RuntimeError:
            return []

    @smproperty.stringvector(name="FileName")
    @smdomain.filelist()
    @smhint.filechooser(extensions="cdb", file_description="ANSYS CDB Files")
    def SetFileName(self, filename):
        """Specify filename for the CDB file to read."""
        if self._filename != filename:
            self._filename = filename
            self._module = None
            self.Modified()

    @smproperty.dataarrayselection(name="Partitions")
    def GetPartitionSelection(self):
        """Get the partition selection object"""
        for name in self._get_available_partitions():
            if self._partition_selection.GetArraySetting(name) == -1:
                self._partition_selection.AddArray(name)
                self._partition_selection.EnableArray(name)
        return self._partition_selection

    def RequestInformation(self, request, inInfoVec, outInfoVec):
        """Set information about the data"""
        executive = self.GetExecutive()
        outInfo = outInfoVec.GetInformationObject(0)

        # No time steps for static meshes
        outInfo.Remove(executive.TIME_STEPS())
        outInfo.Remove(executive.TIME_RANGE())

        return 1

    def RequestData(self, request, inInfoVec, outInfoVec):
        """Generate the output data"""
        output = dsa.WrapDataObject(vtkUnstructuredGrid.GetData(outInfoVec, 0))

        try:
            self._ensure_module()
            names = self._module.get_partition_names()
            enabled = [pid for name, pid in names.items()
                       if self._partition_selection.ArrayExists(name) == 0
                       or self._partition_selection.ArrayIsEnabled(name)]
            output.ShallowCopy(to_vtk_grid(self._module.mesh, partitions=enabled))

        except RuntimeError as e:
            print(f"Error reading CDB file: {e}")
            output.ShallowCopy(vtkUnstructuredGrid())

        return 1
