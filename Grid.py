# -*- coding: UTF-8 -*-

import numpy as np
import matplotlib.pyplot as plt

from constants import OUTOFBOUNDS,MAXDIST

__all__=['GridHex']

class GridHex:
    """
    Rectangular 2D grid of nodes built from the coordinates along each axis

    >>> GridHex(np.linspace(0,1,11),np.linspace(0,1,21))

    Nodes are numbered `node=i+j*nx`, x varies fastest.
    Each node has four neighbours ordered [left,right,down,up] i.e. `2*axis+side`,
    the off-grid sides are reported as `OUTOFBOUNDS`.

    The grid is never modified by a march and can be shared between several
    `FastMarchingMethod` instances.
    """
    def __init__(self,*seeds):
        if len(seeds)!=2:
            raise ValueError('GridHex needs exactly 2 seeds, got %d'%len(seeds))
        self.ndim=2
        self.seeds=[np.asarray(seed,dtype=float) for seed in seeds]
        self.shape=tuple(len(seed) for seed in self.seeds)
        for axis,seed in enumerate(self.seeds):
            if len(seed)<2 or np.any(np.diff(seed)<=0):
                raise ValueError('seed of axis %d must be increasing with at least 2 points'%axis)
        self.nNodes=self.shape[0]*self.shape[1]

        self.XYZs=np.meshgrid(*self.seeds,indexing='ij')
        self.X,self.Y=self.XYZs
        self.xs,self.ys=self.seeds

        # pinned nodes, never touched by the fast marching method
        self.masked=np.zeros(self.nNodes,dtype=bool)

        self._neighbours=self.buildNeighbours()

    def buildNeighbours(self):
        nx,ny=self.shape
        i,j=np.meshgrid(np.arange(nx),np.arange(ny),indexing='ij')
        i,j=self.flatten(i),self.flatten(j)
        node=i+j*nx
        neibs=np.full((self.nNodes,4),OUTOFBOUNDS,dtype=int)
        neibs[:,0]=np.where(i>0,node-1,OUTOFBOUNDS)
        neibs[:,1]=np.where(i<nx-1,node+1,OUTOFBOUNDS)
        neibs[:,2]=np.where(j>0,node-nx,OUTOFBOUNDS)
        neibs[:,3]=np.where(j<ny-1,node+nx,OUTOFBOUNDS)
        return neibs

    def node(self,i,j):
        return i+j*self.shape[0]

    def index(self,node):
        """
        return the (i,j) index of `node`
        """
        return node%self.shape[0],node//self.shape[0]

    def coord(self,node):
        return [seed[ind] for seed,ind in zip(self.seeds,self.index(node))]

    def neighbours(self,node):
        """
        return the list of the 4 neighbours of `node` as [left,right,down,up]
        """
        return self._neighbours[node].tolist()

    def spacing(self,node,axis,side):
        """
        distance between `node` and its neighbour along `axis`,
        side 0 for the lower neighbour and 1 for the upper one
        """
        seed=self.seeds[axis]
        ind=self.index(node)[axis]
        if side==0:
            return seed[ind]-seed[ind-1]
        return seed[ind+1]-seed[ind]

    def flatten(self,Z):
        """
        (nx,ny) field -> node indexed vector
        """
        return np.asarray(Z).ravel(order='F')

    def reshape(self,f):
        """
        node indexed vector -> (nx,ny) field
        """
        return np.asarray(f).reshape(self.shape,order='F')

    def mask(self,nodes):
        self.masked[nodes]=True

    def unmask(self,nodes=None):
        if nodes is None:
            self.masked[:]=False
        else:
            self.masked[nodes]=False

    def maskBoundary(self):
        """
        pin the nodes lying on the domain boundary
        """
        edge=np.any(self._neighbours==OUTOFBOUNDS,axis=1)
        self.masked[edge]=True
        return np.flatnonzero(edge)

    def isMasked(self,node):
        return bool(self.masked[node])

    def isSignChange(self,node,f):
        """
        whether if the zero contour crosses between `node` and one of its
        non masked neighbours, a zero value counts as on the contour
        """
        v=f[node]
        if v==0:
            return True
        for neib in self._neighbours[node]:
            if neib==OUTOFBOUNDS or self.masked[neib]:
                continue
            if v*f[neib]<=0:
                return True
        return False

    def plot(self,f,title=''):
        Z=self.reshape(f)
        Z=np.ma.masked_where(~np.isfinite(Z)|(np.abs(Z)>=MAXDIST),Z)
        plt.contourf(self.X,self.Y,Z)
        plt.colorbar()
        plt.title(title)
        plt.axis('equal')
        return
